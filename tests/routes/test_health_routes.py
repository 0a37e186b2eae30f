class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_metrics_exposes_booking_outcomes(self, client, guide, auth_headers):
        client.post(
            "/api/v1/bookings",
            json={"guide_id": guide.id, "datetime": "2030-01-01T10:00:00Z"},
            headers=auth_headers,
        )

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert 'guidebook_booking_outcomes_total{outcome="created"}' in response.text
        assert "guidebook_http_requests_total" in response.text
