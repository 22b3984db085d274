import re
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from helpdesk.backend.core.errors import InvalidToken
from helpdesk.backend.services.auth_service import SessionClaims, create_session_token, decode_session_token
from helpdesk.shared.schemas import CONTRACT_VERSION, CONTRACT_VERSION_HEADER, generate_id


def test_unknown_route_returns_error_envelope(make_client):
    resp = make_client().http.get("/api/definitely/not/here")
    assert resp.status_code == 404
    body = resp.json()
    assert body["status"] == "Error"
    assert body["payload"]["underlying_error"] == "RouteNotFound"
    assert re.fullmatch(r"[0-9a-f]{32}", body["payload"]["trace_id"])
    assert re.fullmatch(r"[0-9a-f]{16}", body["payload"]["span_id"])


def test_wrong_method_is_route_not_found(make_client):
    resp = make_client().http.put(f"/api/tickets/{generate_id()}", json={})
    assert resp.status_code == 404
    body = resp.json()
    assert body["status"] == "Error"
    assert body["payload"]["underlying_error"] == "RouteNotFound"
    assert body["payload"]["report"].startswith("No such route: PUT /api/tickets/")


def test_incoming_traceparent_is_continued(make_client):
    trace_id = "4bf92f3577b34da6a3ce929d0e0e4736"
    resp = make_client().http.get(
        "/api/users/me", headers={"traceparent": f"00-{trace_id}-00f067aa0ba902b7-01"}
    )
    assert resp.status_code == 401
    payload = resp.json()["payload"]
    assert payload["underlying_error"] == "NoCookie"
    assert payload["trace_id"] == trace_id
    assert payload["span_id"] != "00f067aa0ba902b7"
    assert resp.headers["traceparent"] == f"00-{trace_id}-{payload['span_id']}-01"


def test_health_reports_contract_version(make_client):
    resp = make_client().http.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["contract_version"] == CONTRACT_VERSION
    assert resp.headers[CONTRACT_VERSION_HEADER] == CONTRACT_VERSION


def test_session_token_round_trip_and_rejection(settings):
    token = create_session_token(settings, SessionClaims(user_id="u1", name="User"))
    assert decode_session_token(settings, token) == SessionClaims(user_id="u1", name="User")

    expired = create_session_token(
        settings,
        SessionClaims(user_id="u1", name="User"),
        now=datetime.now(timezone.utc) - timedelta(hours=settings.SESSION_TTL_HOURS + 1),
    )
    with pytest.raises(InvalidToken):
        decode_session_token(settings, expired)

    forged = jwt.encode({"sub": "u1", "name": "User"}, "wrong-secret", algorithm="HS256")
    with pytest.raises(InvalidToken):
        decode_session_token(settings, forged)
