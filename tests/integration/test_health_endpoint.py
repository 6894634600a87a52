"""Integration tests for application endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from globaltax.backend.version import get_project_version


def test_health_endpoint(client: FlaskClient) -> None:
    """Ensure the health endpoint returns a successful status payload."""
    response = client.get("/health")
    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["version"] == get_project_version()
    assert payload["supported_countries"] == [
        "US", "UK", "CA", "AU", "DE", "FR", "BR", "IN", "ZA",
    ]
    assert response.mimetype == "application/json"


def test_unknown_route_returns_problem_payload(client: FlaskClient) -> None:
    response = client.get("/api/v1/unknown")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json() == {
        "error": "not_found",
        "status": 404,
        "message": "The requested resource does not exist",
    }
