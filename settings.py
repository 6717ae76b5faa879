"""Generation settings and the noise-to-cave pipeline they drive."""

import logging
from dataclasses import dataclass, asdict, fields
from typing import Dict, Optional

from .automaton import CaveAutomaton, Connectivity, Grid, RuleConfig
from .errors import InvalidSettings
from .noise import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class CaveSettings:
    """Everything needed to generate one cave."""
    width: int = 100
    height: int = 100
    threshold: float = 45.0  # Noise threshold percentage, lower means more open space
    survival_threshold: int = 4
    birth_threshold: int = 5
    state_count: int = 3
    connectivity: str = Connectivity.EIGHT_WAY.value
    generations: int = 5
    use_states: bool = False  # Graded wall strength instead of open/wall
    seed: Optional[int] = None

    def rule_config(self) -> RuleConfig:
        return RuleConfig(
            survival_threshold=self.survival_threshold,
            birth_threshold=self.birth_threshold,
            state_count=self.state_count,
            connectivity=self.connectivity,
            generations=self.generations,
        )

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "CaveSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidSettings(f"Unknown settings: {', '.join(unknown)}")

        connectivity = data.get("connectivity", cls.connectivity)
        if isinstance(connectivity, Connectivity):
            data = {**data, "connectivity": connectivity.value}
        elif connectivity not in {c.value for c in Connectivity}:
            raise InvalidSettings(f"Unknown connectivity: {connectivity!r}")

        return cls(**data)


def generate_cave(settings: Optional[CaveSettings] = None, rng: RandomSource = None) -> Grid:
    """Seed noise, switch to graded states if requested, and smooth.

    `rng` overrides settings.seed when given.
    """
    settings = settings or CaveSettings()
    if rng is None:
        rng = settings.seed

    cave = CaveAutomaton(
        width=settings.width,
        height=settings.height,
        config=settings.rule_config(),
        use_states=settings.use_states,
    )
    cave.randomize(threshold=settings.threshold, rng=rng)
    cave.run()

    logger.debug(
        "Generated %dx%d cave after %d passes, open fraction %.3f",
        settings.width, settings.height, cave.generation, cave.density(),
    )
    return cave.grid
