"""
Safety Algorithm (Banker's Algorithm) for the Safety Checker.

Decides whether every process can eventually finish from the current
Available / Need / Allocation snapshot.
"""

import numpy as np
from typing import List, Optional, Tuple


def find_safe_sequence(
    available: np.ndarray,
    need_matrix: np.ndarray,
    allocation_matrix: np.ndarray
) -> Optional[List[int]]:
    """
    Run the safety algorithm on raw matrices.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Scan processes in index order; every unfinished process i with
       Need[i] <= Work finishes: Work += Allocation[i]
    3. Repeat full passes until a pass makes no progress
    4. SAFE iff every process finished

    The verdict is a fixed point and does not depend on scan order; only the
    recorded completion order does.

    Time Complexity: O(P²×R)

    Args:
        available: [R] free instances
        need_matrix: [P][R] remaining demand
        allocation_matrix: [P][R] current holdings

    Returns:
        Process indices in virtual completion order, or None if unsafe
    """
    num_processes = need_matrix.shape[0]

    # Work = copy of Available (never modify the caller's vector)
    work = np.array(available, dtype=int, copy=True)
    finish = np.zeros(num_processes, dtype=bool)
    sequence = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i in range(num_processes):
            if finish[i]:
                continue

            if np.all(need_matrix[i] <= work):
                work += allocation_matrix[i]
                finish[i] = True
                sequence.append(i)
                made_progress = True

    if np.all(finish):
        return sequence
    return None


def is_safe_state(state) -> Tuple[bool, Optional[List[int]]]:
    """
    Check if a ResourceState is safe.

    Args:
        state: ResourceState with need computed

    Returns:
        Tuple of (is_safe, safe_sequence if exists else None)

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    sequence = find_safe_sequence(
        state.available_vector,
        state.need_matrix,
        state.allocation_matrix
    )
    return sequence is not None, sequence
