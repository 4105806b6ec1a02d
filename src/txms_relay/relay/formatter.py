"""Response formatting for submission outcomes and relay errors."""

from __future__ import annotations

from txms_relay.errors import RelayError
from txms_relay.provider.models import OutcomeStatus, SubmissionOutcome
from txms_relay.relay.models import ResponsePayload

ERRNO_TRANSPORT = 3
ERRNO_REJECTED = 5
ERRNO_UNKNOWN_PROVIDER = 6

STATUS_BY_OUTCOME: dict[OutcomeStatus, int] = {
    OutcomeStatus.CONFIRMED: 200,
    OutcomeStatus.REJECTED: 400,
    OutcomeStatus.TRANSPORT_ERROR: 500,
    OutcomeStatus.UNKNOWN_PROVIDER: 500,
}


def short_tag(tx: str) -> str:
    """Build the short transaction tag used in replies, e.g. ``<02fc0a>``.

    Takes the first three hex digits after ``0x`` and the last three.
    """
    return f"<{tx[2:5]}{tx[-3:]}>"


class ResponseFormatter:
    """Formats submission outcomes and relay errors into response payloads."""

    def format(self, outcome: SubmissionOutcome) -> ResponsePayload:
        """Format a provider submission outcome.

        Args:
            outcome: Outcome returned by the dispatcher.

        Returns:
            ResponsePayload with the matching status code.
        """
        tag = short_tag(outcome.transaction)
        status = STATUS_BY_OUTCOME[outcome.status]

        if outcome.status == OutcomeStatus.CONFIRMED:
            return ResponsePayload(
                message=f"OK: {tag} {outcome.identifier}",
                sent=True,
                status=status,
                hash=outcome.identifier,
            )

        if outcome.status == OutcomeStatus.REJECTED:
            return ResponsePayload(
                message=f"Err({ERRNO_REJECTED}): {tag} {outcome.error_category}",
                sent=False,
                status=status,
                errno=ERRNO_REJECTED,
                error=outcome.error_category,
            )

        if outcome.status == OutcomeStatus.UNKNOWN_PROVIDER:
            return ResponsePayload(
                message=f"Err({ERRNO_UNKNOWN_PROVIDER}): {outcome.error_category}",
                sent=False,
                status=status,
                errno=ERRNO_UNKNOWN_PROVIDER,
                error=outcome.raw_error,
            )

        return ResponsePayload(
            message=f"Err({ERRNO_TRANSPORT}): {tag}",
            sent=False,
            status=status,
            errno=ERRNO_TRANSPORT,
            error=outcome.raw_error,
        )

    def format_error(self, error: RelayError) -> ResponsePayload:
        """Format a validation error raised before dispatch."""
        return ResponsePayload(
            message=f"Err({error.errno}): {error.category}",
            sent=False,
            status=error.status,
            errno=error.errno,
            error=error.category,
        )
