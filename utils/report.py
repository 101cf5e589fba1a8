"""
Report formatting for the Banker's Safety Checker.

Turns a RequestEvaluation into the console lines printed on standard output.
"""

from typing import Iterator

from algorithms.avoidance import RequestDecision, RequestEvaluation


NEW_NEED_HEADER = "New Need"


def format_evaluation(evaluation: RequestEvaluation) -> Iterator[str]:
    """
    Yield the output lines for an evaluated request.

    Args:
        evaluation: Result of evaluate_request

    Yields:
        Output lines without trailing newlines
    """
    label = evaluation.request.label
    decision = evaluation.decision

    if decision == RequestDecision.CURRENT_UNSAFE:
        yield "The current system is in unsafe state."
        return

    yield f"Before granting the request of {label}, the system is in safe state."

    if decision == RequestDecision.EXCEEDS_LIMITS:
        yield f"{label}'s request cannot be granted (exceeds need or available)."
        return

    yield f"Simulating granting {label}'s request."
    yield from evaluation.granted_state.render_need(NEW_NEED_HEADER)

    if decision == RequestDecision.GRANT_SAFE:
        yield f"{label}'s request can be granted. The system will be in safe state."
    else:
        yield f"{label}'s request cannot be granted. The system will be in unsafe state."
