import numpy as np
import pytest

from tdlab.tabular import ValueTable


def test_table_starts_at_initial_value() -> None:
    """
    Every entry starts at the initial value (0.0 by default, or an optimistic constant).
    """
    table = ValueTable(n_states=3, n_actions=2)
    assert table.shape == (3, 2)
    assert np.all(table.values == 0.0)

    optimistic = ValueTable(n_states=3, n_actions=2, initial_value=5.0)
    assert np.all(optimistic.values == 5.0)


@pytest.mark.parametrize(
    "n_states, n_actions, initial_value",
    [(0, 4, 0.0), (4, 0, 0.0), (-1, 4, 0.0), (4, 4, float("nan")), (4, 4, float("inf"))],
)
def test_invalid_construction_is_rejected(n_states, n_actions, initial_value) -> None:
    with pytest.raises(ValueError):
        ValueTable(n_states=n_states, n_actions=n_actions, initial_value=initial_value)


def test_out_of_range_indices_raise() -> None:
    """
    Out-of-range indices raise instead of being clamped.

    Test Goal: confirm that a bad index can never write to a neighbouring entry.
    Why this matters: a silent clamp would corrupt the table without any visible error.
    """
    table = ValueTable(n_states=2, n_actions=3)

    with pytest.raises(ValueError):
        table.value(2, 0)
    with pytest.raises(ValueError):
        table.value(0, 3)
    with pytest.raises(ValueError):
        table.move_towards(-1, 0, target=1.0, alpha=0.5)
    with pytest.raises(ValueError):
        table.row(5)

    assert np.all(table.values == 0.0)


def test_move_towards_returns_td_error() -> None:
    table = ValueTable(n_states=1, n_actions=2)
    table.values[0, 1] = 1.0

    td_error = table.move_towards(0, 1, target=3.0, alpha=0.25)

    assert td_error == 2.0
    assert table.value(0, 1) == 1.5
    assert table.value(0, 0) == 0.0


def test_row_is_a_read_only_view() -> None:
    """
    Rows handed to exploration policies cannot be written through.
    """
    table = ValueTable(n_states=2, n_actions=2)
    row = table.row(1)
    with pytest.raises(ValueError):
        row[0] = 1.0

    table.move_towards(1, 0, target=4.0, alpha=1.0)
    assert row[0] == 4.0  # still a view of the live table


def test_greedy_actions_and_max_value() -> None:
    table = ValueTable(n_states=3, n_actions=3)
    table.values[0] = [0.0, 2.0, 1.0]
    table.values[1] = [-1.0, -1.0, -3.0]

    assert table.greedy_actions().tolist() == [1, 0, 0]
    assert table.max_value(0) == 2.0
    assert table.max_value(1) == -1.0
