from fastapi.testclient import TestClient

from helpdesk.frontend.backend_client import BackendClient
from scripts import seed_mock_tickets


def test_seed_fills_server_and_closes_clients(app, make_client, monkeypatch):
    opened = []

    def client_over_app(base_url, api_prefix):
        client = BackendClient(base_url=base_url, api_prefix=api_prefix, http=TestClient(app))
        opened.append(client)
        return client

    monkeypatch.setattr(seed_mock_tickets, "BackendClient", client_over_app)
    seed_mock_tickets.seed("http://testserver", "/api")

    assert len(opened) == 2
    assert all(client.http.is_closed for client in opened)

    groups = make_client().search_groups("dorm").unwrap()
    assert [h.value.title for h in groups.top_hits] == ["Dorm manager"]
