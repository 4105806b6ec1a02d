"""Tests for the relay data models."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from txms_relay.relay.models import (
    IncomingPayload,
    RelayResponse,
    ResponsePayload,
    iso_timestamp,
)

MOMENT = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=UTC)


class TestIsoTimestamp:
    """Tests for timestamp formatting."""

    def test_utc_with_milliseconds(self) -> None:
        assert iso_timestamp(MOMENT) == "2024-05-01T12:30:15.123Z"

    def test_converts_to_utc(self) -> None:
        moment = MOMENT.astimezone(timezone(timedelta(hours=2)))
        assert iso_timestamp(moment) == "2024-05-01T12:30:15.123Z"


class TestIncomingPayload:
    """Tests for IncomingPayload.from_dict."""

    def test_body_and_sender(self) -> None:
        payload = IncomingPayload.from_dict({"body": "0xabc", "from": "+15550100"})

        assert payload.body == "0xabc"
        assert payload.sender == "+15550100"
        assert payload.attachments == ()

    def test_media_list(self) -> None:
        payload = IncomingPayload.from_dict(
            {"mms": ["https://a.test/1.txms.txt", "https://a.test/2.jpg"]}
        )

        assert payload.body is None
        assert payload.attachments == ("https://a.test/1.txms.txt", "https://a.test/2.jpg")

    def test_single_media_string(self) -> None:
        payload = IncomingPayload.from_dict({"mms": "https://a.test/1.txms.txt"})

        assert payload.attachments == ("https://a.test/1.txms.txt",)

    def test_non_string_entries_dropped(self) -> None:
        payload = IncomingPayload.from_dict({"mms": ["https://a.test/1.txms.txt", 42, None]})

        assert payload.attachments == ("https://a.test/1.txms.txt",)

    def test_non_string_body_ignored(self) -> None:
        assert IncomingPayload.from_dict({"body": 12345}).body is None

    def test_numeric_sender(self) -> None:
        assert IncomingPayload.from_dict({"from": 15550100}).sender == "15550100"

    def test_custom_field_names(self) -> None:
        data = {"Body": "0xabc", "MediaUrl": ["https://a.test/1.txms.txt"], "body": "ignored"}

        payload = IncomingPayload.from_dict(data, body_field="Body", media_field="MediaUrl")

        assert payload.body == "0xabc"
        assert payload.attachments == ("https://a.test/1.txms.txt",)


class TestResponsePayload:
    """Tests for ResponsePayload serialization."""

    def test_success_fields(self) -> None:
        payload = ResponsePayload(
            message="OK: <02fabc> 0xhash", sent=True, status=200, date=MOMENT, hash="0xhash"
        )

        assert payload.to_dict() == {
            "message": "OK: <02fabc> 0xhash",
            "sent": True,
            "hash": "0xhash",
            "date": "2024-05-01T12:30:15.123Z",
        }

    def test_error_fields(self) -> None:
        payload = ResponsePayload(
            message="Err(1): Empty message",
            sent=False,
            status=422,
            date=MOMENT,
            errno=1,
            error="Empty message",
        )

        data = payload.to_dict()

        assert data == {
            "message": "Err(1): Empty message",
            "sent": False,
            "errno": 1,
            "error": "Empty message",
            "date": "2024-05-01T12:30:15.123Z",
        }
        assert "status" not in data

    def test_default_date_is_now(self) -> None:
        before = datetime.now(UTC)
        payload = ResponsePayload(message="m", sent=True, status=200)

        assert before <= payload.date <= datetime.now(UTC)

    def test_immutable(self) -> None:
        payload = ResponsePayload(message="m", sent=True, status=200)

        with pytest.raises(AttributeError):
            payload.sent = False  # type: ignore[misc]


class TestRelayResponse:
    """Tests for RelayResponse."""

    @pytest.fixture
    def ok(self) -> ResponsePayload:
        return ResponsePayload(message="OK", sent=True, status=200, date=MOMENT)

    @pytest.fixture
    def rejected(self) -> ResponsePayload:
        return ResponsePayload(message="Err(5)", sent=False, status=400, date=MOMENT, errno=5)

    def test_single_payload_body(self, ok: ResponsePayload) -> None:
        response = RelayResponse((ok,))

        assert response.status == 200
        assert response.body() == ok.to_dict()

    def test_batch_body_is_list(self, ok: ResponsePayload, rejected: ResponsePayload) -> None:
        response = RelayResponse((ok, rejected), batch=True)

        assert response.body() == [ok.to_dict(), rejected.to_dict()]

    def test_status_is_first_failure(
        self, ok: ResponsePayload, rejected: ResponsePayload
    ) -> None:
        server_error = ResponsePayload(message="Err(3)", sent=False, status=500, date=MOMENT)

        response = RelayResponse((ok, rejected, server_error), batch=True)

        assert response.status == 400
