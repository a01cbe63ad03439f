"""
Ecoleta Backend — /locations API Tests
=======================================

What:  End-to-end tests of the four location endpoints against a real
       (SQLite) database.
How:   test_client fixture: HTTPX AsyncClient + ASGITransport, DB session
       and FileService dependencies bound to per-test storage.

What we test:
    ✅ Creation writes one association row per item id, in one transaction
    ✅ A failing association insert leaves no location and no associations
    ✅ Validation errors are aggregated and stop the request before any write
    ✅ Filtered listing: city AND uf AND any-of-items, deduplicated
    ✅ Not-found answers 400 with "Location not found"
    ✅ Image replacement stores the upload and rewrites only `image`
"""

import pytest

from ecoleta.models.location import Location, LocationItem


async def _create(client, payload, **overrides):
    response = await client.post("/locations", json={**payload, **overrides})
    assert response.status_code == 200, response.text
    return response.json()


# ══════════════════════════════════════════════════════════════════════════
# POST /locations
# ══════════════════════════════════════════════════════════════════════════


class TestCreateLocation:

    @pytest.mark.asyncio
    async def test_create_returns_location_with_fresh_id(self, test_client, seeded_items, location_payload):
        first = await _create(test_client, location_payload)
        second = await _create(test_client, location_payload, name="Ecoponto Norte")

        assert isinstance(first["id"], int)
        assert second["id"] != first["id"]
        assert first["name"] == "Ecoponto Centro"
        assert first["uf"] == "SP"
        assert first["image"] == "fake.jpg"
        assert first["image_url"] == "/uploads/fake.jpg"

    @pytest.mark.asyncio
    async def test_create_writes_one_association_per_item(
        self, test_client, seeded_items, location_payload, count_rows
    ):
        created = await _create(test_client, location_payload, items=[1, 2, 3])

        assert await count_rows(Location) == 1
        assert await count_rows(LocationItem, LocationItem.location_id == created["id"]) == 3

    @pytest.mark.asyncio
    async def test_duplicate_item_ids_each_get_a_row(
        self, test_client, seeded_items, location_payload, count_rows
    ):
        created = await _create(test_client, location_payload, items=[4, 4])

        assert await count_rows(LocationItem, LocationItem.location_id == created["id"]) == 2

    @pytest.mark.asyncio
    async def test_failed_association_rolls_back_everything(
        self, test_client, seeded_items, location_payload, count_rows
    ):
        """Item 999 does not exist: the FK rejects the insert and nothing survives."""
        response = await test_client.post("/locations", json={**location_payload, "items": [1, 999]})

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        assert await count_rows(Location) == 0
        assert await count_rows(LocationItem) == 0

    @pytest.mark.asyncio
    async def test_unknown_item_id_is_not_prevalidated(self, test_client, seeded_items, location_payload):
        """
        Known discrepancy: submitted item ids are never checked against the
        items table, so an unknown id is not reported as a 400 naming the
        item. It surfaces as a failed transaction (500) instead.
        """
        response = await test_client.post("/locations", json={**location_payload, "items": [999]})

        assert response.status_code != 400
        assert response.status_code == 500
        assert "999" not in response.json()["message"]

    @pytest.mark.asyncio
    async def test_missing_fields_are_reported_together(self, test_client, seeded_items, count_rows):
        response = await test_client.post("/locations", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        fields = {error["field"] for error in body["details"]["errors"]}
        assert fields == {"name", "email", "whatsapp", "latitude", "longitude", "city", "uf", "items"}
        messages = {error["field"]: error["message"] for error in body["details"]["errors"]}
        assert messages["uf"] == '"uf" is a required field'
        assert await count_rows(Location) == 0

    @pytest.mark.asyncio
    async def test_uf_longer_than_two_chars_rejected(self, test_client, seeded_items, location_payload, count_rows):
        response = await test_client.post("/locations", json={**location_payload, "uf": "SPX"})

        assert response.status_code == 400
        errors = response.json()["details"]["errors"]
        assert {"field": "uf", "message": '"uf" should have a maximum length of 2'} in errors
        assert await count_rows(Location) == 0

    @pytest.mark.asyncio
    async def test_empty_uf_rejected(self, test_client, seeded_items, location_payload):
        response = await test_client.post("/locations", json={**location_payload, "uf": ""})

        assert response.status_code == 400
        errors = response.json()["details"]["errors"]
        assert {"field": "uf", "message": '"uf" cannot be an empty field'} in errors

    @pytest.mark.asyncio
    async def test_invalid_email_and_empty_items_both_reported(
        self, test_client, seeded_items, location_payload
    ):
        response = await test_client.post(
            "/locations",
            json={**location_payload, "email": "not-an-email", "items": []},
        )

        assert response.status_code == 400
        fields = {error["field"] for error in response.json()["details"]["errors"]}
        assert {"email", "items"} <= fields


# ══════════════════════════════════════════════════════════════════════════
# GET /locations
# ══════════════════════════════════════════════════════════════════════════


class TestListLocations:

    @pytest.mark.asyncio
    async def test_empty_database_returns_empty_list(self, test_client):
        response = await test_client.get("/locations")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.fixture
    def places(self):
        """(name, city, uf, items) rows used by the filtering tests."""
        return [
            ("A", "Recife", "PE", [1]),
            ("B", "Recife", "PE", [1, 2]),
            ("C", "Recife", "PB", [1]),
            ("D", "Olinda", "PE", [2]),
            ("E", "Recife", "PE", [3]),
        ]

    async def _create_places(self, client, payload, places):
        for name, city, uf, items in places:
            await _create(client, payload, name=name, city=city, uf=uf, items=items)

    @pytest.mark.asyncio
    async def test_no_filters_returns_all(self, test_client, seeded_items, location_payload, places):
        await self._create_places(test_client, location_payload, places)

        response = await test_client.get("/locations")

        assert response.status_code == 200
        assert sorted(loc["name"] for loc in response.json()) == ["A", "B", "C", "D", "E"]

    @pytest.mark.asyncio
    async def test_filters_by_city_uf_and_any_item_without_duplicates(
        self, test_client, seeded_items, location_payload, places
    ):
        await self._create_places(test_client, location_payload, places)

        response = await test_client.get(
            "/locations", params={"city": "Recife", "uf": "PE", "items": "1,2"}
        )

        assert response.status_code == 200
        names = [loc["name"] for loc in response.json()]
        # B accepts both items but appears once
        assert sorted(names) == ["A", "B"]

    @pytest.mark.asyncio
    async def test_items_filter_tolerates_spaces(self, test_client, seeded_items, location_payload, places):
        await self._create_places(test_client, location_payload, places)

        response = await test_client.get(
            "/locations", params={"city": "Recife", "uf": "PE", "items": " 3 , 2"}
        )

        assert response.status_code == 200
        assert sorted(loc["name"] for loc in response.json()) == ["B", "E"]

    @pytest.mark.asyncio
    async def test_partial_filters_return_all(self, test_client, seeded_items, location_payload, places):
        await self._create_places(test_client, location_payload, places)

        for params in ({"city": "Olinda"}, {"uf": "PB"}, {"city": "Recife", "uf": "PE"}, {"items": "3"}):
            response = await test_client.get("/locations", params=params)
            assert response.status_code == 200
            assert len(response.json()) == len(places), params

    @pytest.mark.asyncio
    async def test_blank_item_entries_ignored(self, test_client, seeded_items, location_payload, places):
        await self._create_places(test_client, location_payload, places)

        response = await test_client.get(
            "/locations", params={"city": "Recife", "uf": "PE", "items": "3,"}
        )

        assert response.status_code == 200
        assert [loc["name"] for loc in response.json()] == ["E"]

    @pytest.mark.asyncio
    async def test_non_numeric_items_rejected(self, test_client, seeded_items):
        response = await test_client.get(
            "/locations", params={"city": "Recife", "uf": "PE", "items": "1,papel"}
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


# ══════════════════════════════════════════════════════════════════════════
# GET /locations/{id}
# ══════════════════════════════════════════════════════════════════════════


class TestGetLocation:

    @pytest.mark.asyncio
    async def test_returns_location_and_item_titles(self, test_client, seeded_items, location_payload):
        created = await _create(test_client, location_payload, items=[1, 6])

        response = await test_client.get(f"/locations/{created['id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["location"] == created
        assert sorted(item["title"] for item in body["items"]) == ["Lâmpadas", "Óleo de Cozinha"]

    @pytest.mark.asyncio
    async def test_unknown_id_is_a_client_error(self, test_client):
        response = await test_client.get("/locations/4242")

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Location not found"
        assert "location" not in body


# ══════════════════════════════════════════════════════════════════════════
# PUT /locations/{id}
# ══════════════════════════════════════════════════════════════════════════


class TestUpdateLocationImage:

    @pytest.mark.asyncio
    async def test_replaces_image_and_keeps_other_fields(
        self, test_client, seeded_items, location_payload, sample_image_bytes, upload_storage
    ):
        created = await _create(test_client, location_payload)

        response = await test_client.put(
            f"/locations/{created['id']}",
            files={"image": ("fachada.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["image"].endswith("-fachada.jpg")
        assert updated["image_url"] == f"/uploads/{updated['image']}"
        for field in ("id", "name", "email", "whatsapp", "latitude", "longitude", "city", "uf"):
            assert updated[field] == created[field]
        assert (upload_storage.upload_dir / updated["image"]).read_bytes() == sample_image_bytes

        detail = await test_client.get(f"/locations/{created['id']}")
        assert detail.json()["location"]["image"] == updated["image"]

    @pytest.mark.asyncio
    async def test_uploaded_image_is_served(
        self, test_client, seeded_items, location_payload, sample_image_bytes
    ):
        created = await _create(test_client, location_payload)
        updated = (await test_client.put(
            f"/locations/{created['id']}",
            files={"image": ("logo.png", sample_image_bytes, "image/png")},
        )).json()

        response = await test_client.get(updated["image_url"])

        assert response.status_code == 200
        assert response.content == sample_image_bytes

    @pytest.mark.asyncio
    async def test_unknown_id_writes_nothing(self, test_client, sample_image_bytes, upload_storage, count_rows):
        response = await test_client.put(
            "/locations/4242",
            files={"image": ("fachada.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Location not found"
        assert list(upload_storage.upload_dir.iterdir()) == []
        assert await count_rows(Location) == 0

    @pytest.mark.asyncio
    async def test_unsupported_type_rejected_and_image_unchanged(
        self, test_client, seeded_items, location_payload, upload_storage
    ):
        created = await _create(test_client, location_payload)

        response = await test_client.put(
            f"/locations/{created['id']}",
            files={"image": ("anim.gif", b"GIF89a", "image/gif")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        detail = await test_client.get(f"/locations/{created['id']}")
        assert detail.json()["location"]["image"] == "fake.jpg"
        assert list(upload_storage.upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_without_image_keeps_current_image(
        self, test_client, seeded_items, location_payload, upload_storage
    ):
        created = await _create(test_client, location_payload)

        response = await test_client.put(f"/locations/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created
        assert list(upload_storage.upload_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_without_image_unknown_id_is_not_found(self, test_client):
        response = await test_client.put("/locations/4242")

        assert response.status_code == 400
        assert response.json()["message"] == "Location not found"

    @pytest.mark.asyncio
    async def test_non_image_bytes_with_image_name_rejected(
        self, test_client, seeded_items, location_payload, upload_storage
    ):
        created = await _create(test_client, location_payload)

        response = await test_client.put(
            f"/locations/{created['id']}",
            files={"image": ("evil.jpg", b"MZ\x90\x00 not an image", "image/jpeg")},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert list(upload_storage.upload_dir.iterdir()) == []
        detail = await test_client.get(f"/locations/{created['id']}")
        assert detail.json()["location"]["image"] == "fake.jpg"
