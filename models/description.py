"""
Input description model for the Banker's Safety Checker.

Immutable values produced by the input parser and consumed when the
ResourceState is built.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ResourceRequest:
    """
    A hypothetical additional allocation for one process.

    Attributes:
        label: Process token exactly as written in the input (e.g. "P1")
        pid: Process index parsed from the label
        amounts: Requested instances per resource type [R]
    """
    label: str
    pid: int
    amounts: Tuple[int, ...]


@dataclass(frozen=True)
class SystemDescription:
    """
    Parsed snapshot of the system before any state is built.

    Attributes:
        num_resources: Number of resource types (R)
        num_processes: Number of processes (P)
        available: Free instances by type [R]
        max_demand: [P][R] maximum demand rows
        allocation: [P][R] current allocation rows
        request: Optional single request to evaluate
    """
    num_resources: int
    num_processes: int
    available: Tuple[int, ...]
    max_demand: Tuple[Tuple[int, ...], ...]
    allocation: Tuple[Tuple[int, ...], ...]
    request: Optional[ResourceRequest] = None
