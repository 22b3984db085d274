import json
import logging

import httpx
import pytest

from helpdesk.frontend.backend_client import BackendClient, BackendTransportError
from helpdesk.shared.schemas import (
    CONTRACT_VERSION_HEADER,
    Failure,
    GroupDestination,
    Success,
    TicketStatus,
    generate_id,
)

ERROR_BODY = {
    "status": "Error",
    "payload": {
        "underlying_error": "Forbidden",
        "report": "You are not allowed to perform this action",
        "trace_id": "c" * 32,
        "span_id": "d" * 16,
    },
}


def _client(handler) -> BackendClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return BackendClient(base_url="http://backend", api_prefix="/api", http=http)


def test_connection_failure_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendTransportError):
        _client(handler).get_me()


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(502, text="<html>Bad gateway</html>"),
        httpx.Response(200, json={"unexpected": True}),
    ],
)
def test_non_envelope_response_is_transport_error(response):
    with pytest.raises(BackendTransportError):
        _client(lambda request: response).get_me()


def test_error_envelope_is_a_value_not_an_exception():
    result = _client(lambda request: httpx.Response(403, json=ERROR_BODY)).change_ticket_status(
        generate_id(), TicketStatus.RESOLVED
    )
    assert isinstance(result, Failure)
    assert result.payload.underlying_error == "Forbidden"
    assert result.payload.trace_id == "c" * 32


def test_commands_are_sent_in_canonical_form():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"status": "Success", "payload": None})

    ticket_id, group_id = generate_id(), generate_id()
    result = _client(handler).create_ticket(ticket_id, GroupDestination(id=group_id), "Broken chair", "Help")
    assert isinstance(result, Success)
    assert seen["method"] == "POST"
    assert seen["path"] == f"/api/tickets/{ticket_id}"
    assert seen["body"] == {
        "type": "Create",
        "destination": {"type": "Group", "id": group_id},
        "title": "Broken chair",
        "body": "Help",
    }


def test_contract_version_mismatch_is_logged(caplog):
    def handler(request):
        return httpx.Response(
            200, json={"status": "Success", "payload": None}, headers={CONTRACT_VERSION_HEADER: "999"}
        )

    client = _client(handler)
    with caplog.at_level(logging.WARNING):
        client.send_ticket_message(generate_id(), "hi")
        client.send_ticket_message(generate_id(), "hi again")
    warnings = [r for r in caplog.records if "999" in r.getMessage()]
    assert len(warnings) == 1
