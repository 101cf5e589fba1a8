"""
ResourceState Tests - Core Data Model

Tests row setters, need computation, request checks and state rendering.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np

from models.description import SystemDescription
from models.resource_state import (
    ResourceState,
    StateConstructionError,
    InvalidRequestError,
)
from banker_fixtures import (
    CLASSIC_ALLOCATION,
    CLASSIC_MAX,
    build_state,
    classic_description,
    classic_state,
)


def test_construction_zero_fills():
    """New state has zero-filled matrices of the right shape."""
    state = ResourceState(4, 2)
    assert state.available_vector.shape == (2,)
    assert state.max_demand_matrix.shape == (4, 2)
    assert state.allocation_matrix.shape == (4, 2)
    assert state.need_matrix.shape == (4, 2)
    assert not state.allocation_matrix.any()
    print("  ✓ Matrices zero-filled")


def test_row_setters_report_rejections():
    """Out-of-range pid, wrong length and negative entries are rejected, not dropped silently."""
    state = ResourceState(2, 3)

    update = state.set_max_row(2, [1, 1, 1])
    assert not update
    assert "out of range" in update.reason

    update = state.set_allocation_row(0, [1, 1])
    assert not update.ok
    assert "expected 3" in update.reason

    update = state.set_available([1, -1, 0])
    assert not update
    assert "negative" in update.reason

    # Rejected rows leave the matrices untouched
    assert not state.max_demand_matrix.any()
    assert not state.allocation_matrix.any()
    assert not state.available_vector.any()

    assert state.set_max_row(1, [4, 5, 6])
    assert list(state.max_demand_matrix[1]) == [4, 5, 6]
    print("  ✓ Setter results surface bad rows")


def test_need_invariant():
    """After compute_need, need = max(0, max - allocation) everywhere."""
    state = classic_state()
    for i in range(state.num_processes):
        for j in range(state.num_resources):
            expected = max(0, CLASSIC_MAX[i][j] - CLASSIC_ALLOCATION[i][j])
            assert state.need_matrix[i][j] == expected
    assert list(state.need_matrix[1]) == [1, 2, 2]
    assert list(state.need_matrix[4]) == [4, 3, 1]


def test_need_clamped_when_allocation_exceeds_max():
    state = build_state([0, 0], [[1, 1]], [[3, 0]])
    assert list(state.need_matrix[0]) == [0, 1]


def test_from_description_builds_state():
    state = ResourceState.from_description(classic_description())
    assert state.num_processes == 5
    assert state.num_resources == 3
    assert list(state.available_vector) == [3, 3, 2]
    assert list(state.need_matrix[0]) == [7, 4, 3]


def test_from_description_rejects_bad_rows():
    description = SystemDescription(
        num_resources=2,
        num_processes=1,
        available=(1, 1),
        max_demand=((1, 1, 1),),
        allocation=((0, 0),)
    )
    try:
        ResourceState.from_description(description)
        assert False, "Should have rejected the Max row"
    except StateConstructionError as e:
        assert "Max row 0" in str(e)


def test_can_request_truth_table():
    """can_request holds iff req <= need and req <= available, and pid in range."""
    state = classic_state()
    before = state.allocation_matrix.copy()

    assert state.can_request(1, [1, 0, 2])
    assert state.can_request(1, [0, 0, 0])
    # Exceeds need (P1 needs [1, 2, 2])
    assert not state.can_request(1, [2, 0, 0])
    # Within need (P0 needs [7, 4, 3]) but exceeds available [3, 3, 2]
    assert not state.can_request(0, [4, 0, 0])
    # Out of range
    assert not state.can_request(5, [0, 0, 0])
    assert not state.can_request(-1, [0, 0, 0])

    assert np.array_equal(state.allocation_matrix, before)
    assert list(state.available_vector) == [3, 3, 2]
    print("  ✓ can_request is pure and correct")


def test_negative_or_misshaped_requests_raise():
    state = classic_state()
    for bad in ([1, -1, 0], [1, 0]):
        try:
            state.can_request(1, bad)
            assert False, f"Should reject {bad}"
        except InvalidRequestError:
            pass
        try:
            state.apply_request(1, bad)
            assert False, f"Should reject {bad}"
        except InvalidRequestError:
            pass
    assert list(state.available_vector) == [3, 3, 2]


def test_apply_request_conservation():
    """Applying a valid request moves instances from Available to Allocation."""
    state = classic_state()
    total_before = state.total_vector.copy()

    state.apply_request(1, [1, 0, 2])

    assert list(state.allocation_matrix[1]) == [3, 0, 2]
    assert list(state.available_vector) == [2, 3, 0]
    assert list(state.need_matrix[1]) == [0, 2, 0]
    assert np.array_equal(state.total_vector, total_before)
    state.assert_resource_conservation(total_before, "after applying P1 request")


def test_apply_request_out_of_range_is_noop():
    state = classic_state()
    state.apply_request(7, [1, 0, 0])
    assert list(state.available_vector) == [3, 3, 2]


def test_with_request_leaves_original_untouched():
    state = classic_state()
    granted = state.with_request(1, [1, 0, 2])

    assert list(granted.available_vector) == [2, 3, 0]
    assert list(state.available_vector) == [3, 3, 2]
    assert list(state.need_matrix[1]) == [1, 2, 2]
    assert granted.max_demand_matrix is not state.max_demand_matrix


def test_conservation_violation_detected():
    state = classic_state()
    total = state.total_vector.copy()
    state.available_vector[0] += 1
    try:
        state.assert_resource_conservation(total, "after tampering")
        assert False, "Should have caught conservation violation"
    except AssertionError as e:
        assert "R0" in str(e)


def test_render_need_is_restartable():
    """Rendering can be iterated repeatedly and reflects current values."""
    state = classic_state()
    rendering = state.render_need("Need")

    first = list(rendering)
    second = list(rendering)
    assert first == second
    assert first == ["Need", "7 4 3", "1 2 2", "6 0 0", "0 1 1", "4 3 1"]

    state.apply_request(1, [1, 0, 2])
    assert list(rendering)[2] == "0 2 0"


def test_render_state_layout():
    state = build_state([1, 0], [[2, 1]], [[1, 1]])
    assert str(state.render_state()).splitlines() == [
        "Resources: 2, Processes: 1",
        "Available",
        "1 0",
        "Max",
        "2 1",
        "Allocation",
        "1 1",
        "Need",
        "1 0",
    ]


def main():
    """Run all ResourceState tests."""
    print("\n" + "="*60)
    print("RESOURCE STATE TESTS")
    print("="*60)

    tests = [
        test_construction_zero_fills,
        test_row_setters_report_rejections,
        test_need_invariant,
        test_need_clamped_when_allocation_exceeds_max,
        test_from_description_builds_state,
        test_from_description_rejects_bad_rows,
        test_can_request_truth_table,
        test_negative_or_misshaped_requests_raise,
        test_apply_request_conservation,
        test_apply_request_out_of_range_is_noop,
        test_with_request_leaves_original_untouched,
        test_conservation_violation_detected,
        test_render_need_is_restartable,
        test_render_state_layout,
    ]
    for test in tests:
        print(f"\n{test.__name__}")
        test()

    print("\n✅ ResourceState Tests PASSED")
    return 0


if __name__ == '__main__':
    sys.exit(main())
