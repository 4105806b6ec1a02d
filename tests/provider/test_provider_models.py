"""Tests for provider data models."""

import pytest

from txms_relay.provider.models import (
    OutcomeStatus,
    ProviderConfig,
    ProviderKind,
    SubmissionOutcome,
)


class TestProviderKind:
    """Tests for ProviderKind tag resolution."""

    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("blockbook", ProviderKind.RAW_HTTP),
            ("Blockbook", ProviderKind.RAW_HTTP),
            ("raw-http", ProviderKind.RAW_HTTP),
            ("rpc", ProviderKind.JSON_RPC),
            (" RPC ", ProviderKind.JSON_RPC),
            ("json-rpc", ProviderKind.JSON_RPC),
        ],
    )
    def test_known_tags(self, tag: str, expected: ProviderKind) -> None:
        assert ProviderKind.from_tag(tag) is expected

    def test_unknown_tag(self) -> None:
        assert ProviderKind.from_tag("electrum") is None


class TestProviderConfig:
    """Tests for ProviderConfig."""

    def test_frozen(self) -> None:
        config = ProviderConfig(ProviderKind.RAW_HTTP, "https://node/api/v2/sendtx/")
        with pytest.raises(AttributeError):
            config.endpoint = "https://other"  # type: ignore[misc]

    def test_label(self) -> None:
        assert ProviderConfig(ProviderKind.JSON_RPC, "http://n", "m").label == "json-rpc"
        assert ProviderConfig("electrum", "http://n").label == "unknown"


class TestSubmissionOutcome:
    """Tests for SubmissionOutcome factories."""

    def test_confirmed(self) -> None:
        outcome = SubmissionOutcome.confirmed("0xabc", "0xhash")
        assert outcome.status == OutcomeStatus.CONFIRMED
        assert outcome.sent is True
        assert outcome.identifier == "0xhash"
        assert outcome.error_category is None

    def test_rejected(self) -> None:
        outcome = SubmissionOutcome.rejected("0xabc", "nonce too low", "Nonce too low.")
        assert outcome.status == OutcomeStatus.REJECTED
        assert outcome.sent is False
        assert outcome.identifier is None
        assert outcome.error_category == "Nonce too low."
        assert outcome.raw_error == "nonce too low"

    def test_transport_error(self) -> None:
        outcome = SubmissionOutcome.transport_error("0xabc", "Connection refused")
        assert outcome.status == OutcomeStatus.TRANSPORT_ERROR
        assert outcome.sent is False
        assert outcome.error_category == "Transport error"

    def test_unknown_provider(self) -> None:
        outcome = SubmissionOutcome.unknown_provider("0xabc", "electrum")
        assert outcome.status == OutcomeStatus.UNKNOWN_PROVIDER
        assert outcome.sent is False
        assert outcome.raw_error == "Unknown provider type: electrum"
