class TestListGuidesRoute:
    def test_lists_guides_with_free_slots(self, client, make_guide):
        guide = make_guide(
            availability=["2030-01-01T11:00:00+01:00", "bad", "2030-01-02T10:00:00Z"]
        )

        response = client.get("/api/v1/guides")

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"total": 1, "page": 1, "size": 10}
        assert body["expertises"] == ["Hiking"]
        assert body["guides"] == [
            {
                "id": guide.id,
                "name": "Ada Guide",
                "expertise": "Hiking",
                "availability": ["2030-01-01T10:00:00Z", "2030-01-02T10:00:00Z"],
            }
        ]

    def test_booked_slots_disappear_from_listing(self, client, guide, auth_headers):
        client.post(
            "/api/v1/bookings",
            json={"guide_id": guide.id, "datetime": "2030-01-01T10:00:00Z"},
            headers=auth_headers,
        )

        body = client.get("/api/v1/guides").json()

        assert body["guides"][0]["availability"] == ["2030-01-01T11:00:00Z"]

    def test_invalid_paging_uses_defaults(self, client, guide):
        body = client.get("/api/v1/guides", params={"page": "abc", "size": "-1"}).json()

        assert body["pagination"] == {"total": 1, "page": 1, "size": 10}

    def test_size_is_capped_at_100(self, client, guide):
        body = client.get("/api/v1/guides", params={"size": "1000"}).json()

        assert body["pagination"]["size"] == 100

    def test_page_past_integer_range_uses_first_page(self, client, guide):
        response = client.get("/api/v1/guides", params={"page": str(10**20)})

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"total": 1, "page": 1, "size": 10}
        assert [g["id"] for g in body["guides"]] == [guide.id]

    def test_expertise_filter(self, client, make_guide):
        make_guide(name="Ada", expertise="Hiking")
        make_guide(name="Ben", expertise="Kayaking")

        filtered = client.get("/api/v1/guides", params={"expertise": "kayaking"}).json()
        everyone = client.get("/api/v1/guides", params={"expertise": "All"}).json()

        assert [g["name"] for g in filtered["guides"]] == ["Ben"]
        assert filtered["pagination"]["total"] == 1
        assert everyone["pagination"]["total"] == 2
        assert sorted(filtered["expertises"]) == ["Hiking", "Kayaking"]

    def test_listing_is_public(self, client):
        response = client.get("/api/v1/guides")

        assert response.status_code == 200
        assert response.json()["guides"] == []
