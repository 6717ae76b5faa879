import numpy as np
import pytest

from cave_automata import (
    CaveAutomaton,
    Grid,
    GridMode,
    InvalidGrid,
    InvalidRuleConfig,
    RuleConfig,
    generate_noise,
    seed_states,
    smooth_graded,
)
from cave_automata.automaton import apply_pass
from cave_automata.multistate import population_by_state


def test_seed_states_maps_open_to_top_state(open_interior):
    states = seed_states(open_interior(4, 4), 3)
    assert states.dtype == np.int32
    assert np.array_equal(states, np.array([
        [0, 0, 0, 0],
        [0, 3, 3, 0],
        [0, 3, 3, 0],
        [0, 0, 0, 0],
    ]))


def test_seed_states_needs_a_level():
    with pytest.raises(InvalidRuleConfig):
        seed_states(np.ones((3, 3), dtype=bool), 0)


def test_full_interior_single_pass(open_interior):
    states = seed_states(open_interior(5, 5), 3)
    result = smooth_graded(states, RuleConfig(survival_threshold=4, generations=0))

    # Interior corners weaken, the rest are already at the ceiling
    assert np.array_equal(result, np.array([
        [0, 0, 0, 0, 0],
        [0, 2, 3, 2, 0],
        [0, 3, 3, 3, 0],
        [0, 2, 3, 2, 0],
        [0, 0, 0, 0, 0],
    ]))


def test_walls_strengthen_with_enough_neighbors():
    states = np.zeros((5, 5), dtype=np.int32)
    states[1:-1, 1:-1] = 2
    states[2, 2] = 0

    result = smooth_graded(states, RuleConfig(survival_threshold=4, state_count=3, generations=0))

    assert result[2, 2] == 1  # 8 open neighbors
    assert result[1, 2] == 3  # 4 open neighbors
    assert result[1, 1] == 1  # 2 open neighbors


def test_passes_read_the_previous_pass():
    config = RuleConfig(survival_threshold=4, generations=0)
    states = seed_states(generate_noise(20, 20, 40, rng=6), config.state_count)

    once = smooth_graded(states, config)
    twice = smooth_graded(once, config)

    assert np.array_equal(smooth_graded(states, RuleConfig(survival_threshold=4, generations=1)), twice)


@pytest.mark.parametrize("survival", [0, 3, 5, 8])
@pytest.mark.parametrize("state_count", [1, 3, 6])
def test_states_stay_clamped(survival, state_count):
    rng = np.random.default_rng(survival * 10 + state_count)
    states = rng.integers(0, state_count + 1, size=(14, 18), dtype=np.int32)
    config = RuleConfig(survival_threshold=survival, state_count=state_count, generations=0)

    grid = Grid.graded(states)
    for _ in range(12):
        grid = apply_pass(grid, config)
        assert grid.cells.min() >= 0
        assert grid.cells.max() <= state_count


def test_dimensions_and_border_preserved():
    states = seed_states(generate_noise(13, 9, 45, rng=2), 4)
    result = smooth_graded(states, RuleConfig(state_count=4, generations=6))
    assert result.shape == (9, 13)
    assert not result[0, :].any() and not result[-1, :].any()
    assert not result[:, 0].any() and not result[:, -1].any()


def test_states_out_of_range_rejected():
    states = np.full((4, 4), 5, dtype=np.int32)
    with pytest.raises(InvalidGrid):
        smooth_graded(states, RuleConfig(state_count=3))

    with pytest.raises(InvalidGrid):
        smooth_graded(-states, RuleConfig(state_count=3))


def test_graded_mode_needs_a_state_count():
    states = np.zeros((4, 4), dtype=np.int32)
    with pytest.raises(InvalidRuleConfig):
        smooth_graded(states, RuleConfig(state_count=0))


def test_state_count_ignored_in_binary_mode():
    config = RuleConfig(state_count=0)
    grid = Grid.binary(np.zeros((4, 4), dtype=bool))
    assert apply_pass(grid, config).mode is GridMode.BINARY


def test_population_by_state():
    states = np.array([[0, 0, 1], [3, 3, 3]])
    assert population_by_state(states) == {0: 2, 1: 1, 3: 3}


def test_cave_with_states():
    config = RuleConfig(state_count=4, generations=2)
    cave = CaveAutomaton(16, 12, config, use_states=True)
    cave.randomize(threshold=45, rng=3)

    assert cave.grid.mode is GridMode.GRADED
    assert set(np.unique(cave.cells)) <= {0, 4}

    start = cave.cells.copy()
    cave.run()
    assert np.array_equal(cave.cells, smooth_graded(start, config))
    assert cave.population() == int(np.sum(cave.cells > 0))


def test_wide_int_states_are_range_checked_before_smoothing():
    states = np.zeros((3, 3), dtype=np.int64)
    states[1, 1] = 2**32 + 1
    with pytest.raises(InvalidGrid):
        smooth_graded(states, RuleConfig(state_count=3, generations=0))


def test_float_states_rejected():
    states = np.zeros((3, 3))
    states[1, 1] = 2.7
    with pytest.raises(InvalidGrid):
        smooth_graded(states, RuleConfig(state_count=3, generations=0))


def test_graded_grid_keeps_integer_dtype():
    states = np.zeros((4, 4), dtype=np.int64)
    assert Grid.graded(states).cells.dtype == np.int64
    assert smooth_graded(states, RuleConfig()).dtype == np.int64


def test_unsigned_states_do_not_wrap():
    states = np.zeros((5, 5), dtype=np.uint8)
    states[1:-1, 1:-1] = 255
    states[2, 2] = 0
    config = RuleConfig(survival_threshold=8, state_count=255, generations=0)

    result = smooth_graded(states, config)

    assert result[2, 2] == 1  # 8 open neighbors, strengthens from 0
    assert result[1, 1] == 254  # weakens without wrapping
    assert result.max() <= 255
    assert not result[0, :].any()

    walls = np.zeros((4, 4), dtype=np.uint8)
    assert not smooth_graded(walls, config).any()
