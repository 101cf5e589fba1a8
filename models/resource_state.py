"""
Resource State model for the Banker's Safety Checker.

Holds the Available vector and the Max, Allocation and Need matrices, and
exposes the safety check and request validation/application operations.
"""

import numpy as np
from typing import Callable, Iterator, List, Optional, Sequence
from dataclasses import dataclass, field

from algorithms.safety import is_safe_state
from models.description import SystemDescription
from utils.logger import CheckerLogger, NULL_LOGGER


class StateConstructionError(Exception):
    """Raised when a description cannot be loaded into a ResourceState."""
    pass


class InvalidRequestError(ValueError):
    """Raised for requests that are not physically meaningful."""
    pass


@dataclass(frozen=True)
class RowUpdate:
    """Result of a row setter: ok, or rejected with a reason."""
    ok: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.ok


class StateRendering:
    """
    Lazy, restartable text rendering of state matrices.

    Every iteration regenerates the lines from the current matrices.
    """

    def __init__(self, line_factory: Callable[[], Iterator[str]]):
        self._line_factory = line_factory

    def __iter__(self) -> Iterator[str]:
        return self._line_factory()

    def __str__(self) -> str:
        return "\n".join(self)


def _format_row(row) -> str:
    return " ".join(str(int(value)) for value in row)


@dataclass(eq=False)
class ResourceState:
    """
    Snapshot of resource usage for Banker's Algorithm.

    Attributes:
        num_processes: Number of processes (P)
        num_resources: Number of resource types (R)
        logger: Diagnostics sink for rejected rows and no-op requests
        available_vector: [R] Free resource instances by type
        max_demand_matrix: [P][R] Maximum resource need declared by each process
        allocation_matrix: [P][R] Current resources held by each process
        need_matrix: [P][R] Max - Allocation, clamped at zero
    """
    num_processes: int
    num_resources: int
    logger: CheckerLogger = field(default=NULL_LOGGER, repr=False, compare=False)

    available_vector: np.ndarray = field(init=False, repr=False, compare=False)
    max_demand_matrix: np.ndarray = field(init=False, repr=False, compare=False)
    allocation_matrix: np.ndarray = field(init=False, repr=False, compare=False)
    need_matrix: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Allocate zero-filled matrices and vectors."""
        if self.num_processes < 0 or self.num_resources < 0:
            raise ValueError(
                f"Dimensions must be non-negative "
                f"(processes={self.num_processes}, resources={self.num_resources})"
            )
        shape = (self.num_processes, self.num_resources)
        self.available_vector = np.zeros(self.num_resources, dtype=int)
        self.max_demand_matrix = np.zeros(shape, dtype=int)
        self.allocation_matrix = np.zeros(shape, dtype=int)
        self.need_matrix = np.zeros(shape, dtype=int)

    @classmethod
    def from_description(
        cls,
        description: SystemDescription,
        logger: CheckerLogger = NULL_LOGGER
    ) -> "ResourceState":
        """
        Build a fully populated state (need computed) from parsed input.

        Raises:
            StateConstructionError: If any row is rejected
        """
        state = cls(description.num_processes, description.num_resources, logger=logger)

        updates = [("Available", state.set_available(description.available))]
        for pid, row in enumerate(description.max_demand):
            updates.append((f"Max row {pid}", state.set_max_row(pid, row)))
        for pid, row in enumerate(description.allocation):
            updates.append((f"Allocation row {pid}", state.set_allocation_row(pid, row)))

        for what, update in updates:
            if not update:
                raise StateConstructionError(f"{what} rejected: {update.reason}")

        if len(description.max_demand) != state.num_processes:
            raise StateConstructionError(
                f"Max has {len(description.max_demand)} rows, expected {state.num_processes}"
            )
        if len(description.allocation) != state.num_processes:
            raise StateConstructionError(
                f"Allocation has {len(description.allocation)} rows, expected {state.num_processes}"
            )

        state.compute_need()
        return state

    # ------------------------------------------------------------------
    # Row setters
    # ------------------------------------------------------------------

    def _check_row(self, row: Sequence[int]) -> Optional[str]:
        """Return a rejection reason for a row, or None if it fits."""
        if len(row) != self.num_resources:
            return f"row has {len(row)} entries, expected {self.num_resources}"
        if any(value < 0 for value in row):
            return f"row contains negative entries: {list(row)}"
        return None

    def _check_pid(self, pid: int) -> Optional[str]:
        if pid < 0 or pid >= self.num_processes:
            return f"process index {pid} out of range [0, {self.num_processes})"
        return None

    def _reject(self, what: str, reason: str) -> RowUpdate:
        self.logger.warning(f"{what} not updated: {reason}")
        return RowUpdate(ok=False, reason=reason)

    def set_available(self, row: Sequence[int]) -> RowUpdate:
        """Replace the Available vector."""
        reason = self._check_row(row)
        if reason:
            return self._reject("Available", reason)
        self.available_vector[:] = row
        return RowUpdate(ok=True)

    def set_max_row(self, pid: int, row: Sequence[int]) -> RowUpdate:
        """Replace the Max row of process pid."""
        reason = self._check_pid(pid) or self._check_row(row)
        if reason:
            return self._reject(f"Max row {pid}", reason)
        self.max_demand_matrix[pid] = row
        return RowUpdate(ok=True)

    def set_allocation_row(self, pid: int, row: Sequence[int]) -> RowUpdate:
        """Replace the Allocation row of process pid."""
        reason = self._check_pid(pid) or self._check_row(row)
        if reason:
            return self._reject(f"Allocation row {pid}", reason)
        self.allocation_matrix[pid] = row
        return RowUpdate(ok=True)

    # ------------------------------------------------------------------
    # Banker's Algorithm
    # ------------------------------------------------------------------

    def compute_need(self) -> None:
        """
        Compute Need = Max - Allocation, clamped at zero.

        Must run once after Max and Allocation are populated. Allocation
        above Max is masked by the clamp rather than reported.
        """
        self.need_matrix = np.maximum(self.max_demand_matrix - self.allocation_matrix, 0)

    def is_safe(self) -> bool:
        """Return True if some order lets every process finish."""
        safe, _ = is_safe_state(self)
        return safe

    def safe_sequence(self) -> Optional[List[int]]:
        """Virtual completion order of a safe state, or None if unsafe."""
        _, sequence = is_safe_state(self)
        return sequence

    def _validate_request(self, request: Sequence[int]) -> np.ndarray:
        if len(request) != self.num_resources:
            raise InvalidRequestError(
                f"Request has {len(request)} entries, expected {self.num_resources}"
            )
        amounts = np.asarray(request, dtype=int)
        if np.any(amounts < 0):
            raise InvalidRequestError(f"Request contains negative amounts: {list(request)}")
        return amounts

    def can_request(self, pid: int, request: Sequence[int]) -> bool:
        """
        Check that a request fits within the process's Need and Available.

        Args:
            pid: Requesting process index
            request: Instances requested per resource type [R]

        Returns:
            True if request <= Need[pid] and request <= Available; False if
            either bound is exceeded or pid is out of range

        Raises:
            InvalidRequestError: If request has negative entries or wrong length
        """
        amounts = self._validate_request(request)
        if self._check_pid(pid):
            return False
        return bool(
            np.all(amounts <= self.need_matrix[pid])
            and np.all(amounts <= self.available_vector)
        )

    def apply_request(self, pid: int, request: Sequence[int]) -> None:
        """
        Grant a request in place. Performs no grantability check; call
        can_request first.

        Raises:
            InvalidRequestError: If request has negative entries or wrong length
        """
        amounts = self._validate_request(request)
        reason = self._check_pid(pid)
        if reason:
            self.logger.debug(f"Request ignored: {reason}")
            return

        self.allocation_matrix[pid] += amounts
        self.available_vector -= amounts
        self.need_matrix[pid] = np.maximum(self.need_matrix[pid] - amounts, 0)

    def copy(self) -> "ResourceState":
        """Independent deep copy of this state."""
        clone = ResourceState(self.num_processes, self.num_resources, logger=self.logger)
        clone.available_vector = self.available_vector.copy()
        clone.max_demand_matrix = self.max_demand_matrix.copy()
        clone.allocation_matrix = self.allocation_matrix.copy()
        clone.need_matrix = self.need_matrix.copy()
        return clone

    def with_request(self, pid: int, request: Sequence[int]) -> "ResourceState":
        """Return a copy with the request applied; this state is untouched."""
        granted = self.copy()
        granted.apply_request(pid, request)
        return granted

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    @property
    def total_vector(self) -> np.ndarray:
        """Total instances per type: allocated + available."""
        return self.allocation_matrix.sum(axis=0) + self.available_vector

    def assert_resource_conservation(self, total: Sequence[int], context: str = "") -> None:
        """Verify resource conservation: allocated + available = total for all resources.

        Args:
            total: Expected total instances per resource type
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
        """
        current = self.total_vector
        for r_idx in range(self.num_resources):
            allocated = self.allocation_matrix[:, r_idx].sum()
            available = self.available_vector[r_idx]

            assert current[r_idx] == total[r_idx], (
                f"Resource conservation violated for R{r_idx} {context}\n"
                f"  Allocated: {allocated}, Available: {available}, Total: {total[r_idx]}\n"
                f"  Allocated + Available = {current[r_idx]} != {total[r_idx]}"
            )

            assert available >= 0, (
                f"Negative available resources for R{r_idx} {context}\n"
                f"  Available: {available}"
            )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def render_need(self, header: str) -> StateRendering:
        """Header line followed by one Need row per process."""
        def lines() -> Iterator[str]:
            yield header
            for row in self.need_matrix:
                yield _format_row(row)
        return StateRendering(lines)

    def render_state(self) -> StateRendering:
        """Available, Max, Allocation and Need, one section after another."""
        def lines() -> Iterator[str]:
            yield f"Resources: {self.num_resources}, Processes: {self.num_processes}"
            yield "Available"
            yield _format_row(self.available_vector)
            for title, matrix in (
                ("Max", self.max_demand_matrix),
                ("Allocation", self.allocation_matrix),
                ("Need", self.need_matrix),
            ):
                yield title
                for row in matrix:
                    yield _format_row(row)
        return StateRendering(lines)
