"""
Tests for the health check endpoint.
"""


def test_health_check_returns_200(client):
    response = client.get("/health")
    assert response.status_code == 200


def test_health_check_needs_no_token(client):
    """Load balancers check health without credentials."""
    response = client.get("/health")
    assert response.json()["service"] == "itam"


def test_health_check_reports_database_status(client):
    """
    The endpoint always reports whether the database is reachable,
    since sequence increments and permission loads depend on it.
    """
    data = client.get("/health").json()
    assert data["database"] == "healthy"
    assert data["status"] == "healthy"
