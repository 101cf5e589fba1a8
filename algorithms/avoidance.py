"""
Deadlock Avoidance (request evaluation) for the Safety Checker.

Decides whether one hypothetical request can be granted while keeping the
system in a safe state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from models.description import ResourceRequest
from models.resource_state import ResourceState
from utils.logger import CheckerLogger, NULL_LOGGER


class RequestDecision(Enum):
    """Outcomes of a request evaluation."""
    CURRENT_UNSAFE = "current_unsafe"
    EXCEEDS_LIMITS = "exceeds_limits"
    GRANT_SAFE = "grant_safe"
    GRANT_UNSAFE = "grant_unsafe"


@dataclass
class RequestEvaluation:
    """
    Result of evaluating one request.

    Attributes:
        request: The evaluated request
        decision: Outcome of the evaluation
        granted_state: State after the speculative grant (None if the grant
            was never simulated)
        safe_sequence: Completion order of the state the verdict rests on,
            if that state is safe
    """
    request: ResourceRequest
    decision: RequestDecision
    granted_state: Optional[ResourceState] = None
    safe_sequence: Optional[List[int]] = None

    @property
    def granted(self) -> bool:
        """True only when the request keeps the system safe."""
        return self.decision == RequestDecision.GRANT_SAFE


def evaluate_request(
    state: ResourceState,
    request: ResourceRequest,
    logger: CheckerLogger = NULL_LOGGER
) -> RequestEvaluation:
    """
    Evaluate a request using Banker's Algorithm.

    Steps:
    1. Check the current state is safe (otherwise stop: CURRENT_UNSAFE)
    2. Validate: request <= need and request <= available (else EXCEEDS_LIMITS)
    3. Tentatively allocate on a copy of the state
    4. Run safety algorithm on the copy: GRANT_SAFE or GRANT_UNSAFE

    The caller's state is never modified.

    Args:
        state: Current state with need computed
        request: Request to evaluate
        logger: Diagnostics sink

    Returns:
        RequestEvaluation describing the decision
    """
    # Step 1: Current state must be safe before anything else
    current_sequence = state.safe_sequence()
    logger.log_safety("before request", current_sequence is not None, current_sequence)
    if current_sequence is None:
        return RequestEvaluation(request, RequestDecision.CURRENT_UNSAFE)

    # Step 2: Request must fit within need and available
    if not state.can_request(request.pid, request.amounts):
        logger.debug(
            f"{request.label} request {list(request.amounts)} exceeds "
            f"need or available (available: {list(state.available_vector)})"
        )
        return RequestEvaluation(
            request,
            RequestDecision.EXCEEDS_LIMITS,
            safe_sequence=current_sequence
        )

    # Step 3: Tentative allocation on a copy
    granted_state = state.with_request(request.pid, request.amounts)
    granted_state.assert_resource_conservation(
        state.total_vector,
        f"after simulating {request.label}'s request"
    )
    logger.debug(f"Available after simulated grant: {list(granted_state.available_vector)}")

    # Step 4: Safety of the post-grant state decides
    granted_sequence = granted_state.safe_sequence()
    logger.log_safety("after request", granted_sequence is not None, granted_sequence)

    if granted_sequence is not None:
        decision = RequestDecision.GRANT_SAFE
    else:
        decision = RequestDecision.GRANT_UNSAFE

    return RequestEvaluation(
        request,
        decision,
        granted_state=granted_state,
        safe_sequence=granted_sequence
    )
