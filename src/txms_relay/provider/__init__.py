"""Provider layer - submission of transactions to blockchain nodes."""

from txms_relay.provider.dispatcher import ProviderDispatcher
from txms_relay.provider.errors import KNOWN_ERRORS, ErrorNormalizer, normalize_error
from txms_relay.provider.models import (
    OutcomeStatus,
    ProviderConfig,
    ProviderKind,
    SubmissionOutcome,
)

__all__ = [
    "KNOWN_ERRORS",
    "ErrorNormalizer",
    "OutcomeStatus",
    "ProviderConfig",
    "ProviderDispatcher",
    "ProviderKind",
    "SubmissionOutcome",
    "normalize_error",
]
