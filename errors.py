"""Exceptions raised when cave generation inputs are out of range."""


class CaveError(ValueError):
    """Base class for invalid cave generation inputs."""


class InvalidDimension(CaveError):
    """Grid width or height is below 1, or the grid is not 2-D."""


class InvalidThreshold(CaveError):
    """Noise threshold is outside [0, 100]."""


class InvalidRuleConfig(CaveError):
    """Rule thresholds, state count or generation count are out of range."""


class InvalidGrid(CaveError):
    """Graded grid holds states outside [0, state_count]."""


class InvalidSettings(CaveError):
    """Settings mapping has unknown keys or values."""
