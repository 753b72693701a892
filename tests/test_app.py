from fastapi.testclient import TestClient

from identity_server.main import create_app


def test_lifespan_opens_and_closes_infrastructure(container, ledger):
    with TestClient(create_app(container=container)) as client:
        assert client.get("/health").status_code == 200
        assert not ledger.closed
    assert ledger.closed


def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "HTTP_ERROR"


def test_service_errors_hide_stack_unless_debug(client, container):
    response = client.get("/api/auth/challenge/not-a-wallet")
    assert "stack" not in response.json()["error"]

    container.settings.debug = True
    response = client.get("/api/auth/challenge/not-a-wallet")
    assert "InvalidIdentity" in response.json()["error"]["stack"]
