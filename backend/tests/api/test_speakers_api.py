"""Speaker API tests - validation, lookup, availability and rate limiting.

Tests cover:
    - POST /api/speakers: 201 on valid payload, 400 VALIDATION_ERROR otherwise
    - GET /api/speakers/{id}: 404 SPEAKER_NOT_FOUND, private fields for owners
    - POST /api/speakers/{id}/availability: end <= start, overlap conflict
    - Create/edit limiter: the 11th create inside the window is rejected
    - Ownership on update/delete, admin-only verification
"""

from datetime import timedelta

from tradeconnect.core import messages

from tests.factories import future


def _speaker_payload(**overrides) -> dict:
    payload = {
        "firstName": "María",
        "lastName": "González",
        "email": "maria.gonzalez@example.com",
        "baseRate": 150,
        "rateType": "hourly",
        "modalities": ["presential", "virtual"],
        "languages": ["spanish", "english"],
        "category": "national",
    }
    payload.update(overrides)
    return payload


def _block_payload(start, end) -> dict:
    return {
        "startDate": start.isoformat(),
        "endDate": end.isoformat(),
        "reason": "Conferencia internacional",
        "isRecurring": False,
    }


# --- Create -----------------------------------------------------------------------

class TestCreateSpeaker:
    async def test_valid_speaker_created(self, client, user_headers):
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(), headers=user_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == messages.SPEAKER_CREATED
        assert body["data"]["fullName"] == "María González"
        assert body["data"]["createdBy"] == 10
        assert body["data"]["rating"] == 0

    async def test_invalid_email_rejected(self, client, user_headers):
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(email="no-es-email"),
            headers=user_headers,
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "email"

    async def test_short_name_uses_spanish_message(self, client, user_headers):
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(firstName="M"),
            headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == (
            "El nombre debe tener entre 2 y 100 caracteres"
        )

    async def test_empty_modalities_rejected(self, client, user_headers):
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(modalities=[]),
            headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Debe seleccionar al menos una modalidad"

    async def test_negative_rate_rejected(self, client, user_headers):
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(baseRate=-1),
            headers=user_headers,
        )
        assert resp.status_code == 400

    async def test_requires_authentication(self, client):
        resp = await client.post("/api/speakers", json=_speaker_payload())
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    async def test_duplicate_email_conflict(self, client, user_headers):
        first = await client.post(
            "/api/speakers", json=_speaker_payload(), headers=user_headers,
        )
        assert first.status_code == 201
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(), headers=user_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "SPEAKER_EMAIL_EXISTS"

    async def test_unknown_specialty_rejected(self, client, user_headers):
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(specialtyIds=[999]),
            headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == messages.SPECIALTIES_NOT_FOUND

    async def test_specialties_attached(self, client, user_headers, seed):
        specialty = await seed.specialty("Comercio Exterior")
        resp = await client.post(
            "/api/speakers", json=_speaker_payload(specialtyIds=[specialty.id]),
            headers=user_headers,
        )
        assert resp.status_code == 201
        names = [s["name"] for s in resp.json()["data"]["specialties"]]
        assert names == ["Comercio Exterior"]


class TestCreateEditRateLimit:
    async def test_eleventh_create_is_rate_limited(self, client, user_headers):
        for i in range(10):
            resp = await client.post(
                "/api/speakers",
                json=_speaker_payload(email=f"speaker{i}@example.com"),
                headers=user_headers,
            )
            assert resp.status_code == 201

        resp = await client.post(
            "/api/speakers",
            json=_speaker_payload(email="speaker10@example.com"),
            headers=user_headers,
        )
        assert resp.status_code == 429
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "RATE_LIMIT_EXCEEDED"
        assert body["message"] == messages.RATE_LIMIT_CREATE_EDIT


# --- Read -------------------------------------------------------------------------

class TestGetSpeaker:
    async def test_unknown_speaker_is_404(self, client):
        resp = await client.get("/api/speakers/9999")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "SPEAKER_NOT_FOUND"
        assert body["message"] == messages.SPEAKER_NOT_FOUND

    async def test_public_view_hides_private_fields(self, client, seed):
        speaker = await seed.speaker(nit="12345678", created_by=10)
        resp = await client.get(f"/api/speakers/{speaker.id}")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert "nit" not in data
        assert data["availabilityBlocks"] == []
        assert data["evaluationStats"]["totalEvaluations"] == 0

    async def test_owner_sees_private_fields(self, client, seed, user_headers):
        speaker = await seed.speaker(nit="12345678", created_by=10)
        resp = await client.get(
            f"/api/speakers/{speaker.id}", headers=user_headers,
        )
        assert resp.json()["data"]["nit"] == "12345678"

    async def test_list_filters_and_paginates(self, client, seed):
        await seed.speaker(first_name="Luis", rating=4.5, category="expert")
        await seed.speaker(first_name="Sofía", rating=3.0)
        await seed.speaker(first_name="Pedro", rating=4.8, is_active=False)
        resp = await client.get(
            "/api/speakers", params={"minRating": 4, "limit": 5},
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert [s["firstName"] for s in data["speakers"]] == ["Luis"]
        assert data["pagination"]["total"] == 1
        assert data["pagination"]["limit"] == 5

    async def test_list_filters_by_modality(self, client, seed):
        await seed.speaker(first_name="Virtual", modalities=["virtual"])
        await seed.speaker(first_name="Presencial", modalities=["presential"])
        resp = await client.get(
            "/api/speakers", params={"modalities": "virtual"},
        )
        names = [s["firstName"] for s in resp.json()["data"]["speakers"]]
        assert names == ["Virtual"]


# --- Update / delete / verify -----------------------------------------------------

class TestSpeakerOwnership:
    async def test_non_owner_cannot_update(self, client, seed, other_headers):
        speaker = await seed.speaker(created_by=10)
        resp = await client.put(
            f"/api/speakers/{speaker.id}", json={"shortBio": "Hola"},
            headers=other_headers,
        )
        assert resp.status_code == 403
        assert resp.json()["message"] == messages.SPEAKER_UPDATE_FORBIDDEN

    async def test_owner_updates(self, client, seed, user_headers):
        speaker = await seed.speaker(created_by=10)
        resp = await client.put(
            f"/api/speakers/{speaker.id}", json={"baseRate": 300},
            headers=user_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["baseRate"] == 300

    async def test_explicit_null_rejected(self, client, seed, user_headers):
        speaker = await seed.speaker(created_by=10, base_rate=120)
        resp = await client.put(
            f"/api/speakers/{speaker.id}", json={"baseRate": None},
            headers=user_headers,
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["message"] == "La tarifa base no puede ser nula"
        assert body["details"][0]["field"] == "baseRate"

        detail = await client.get(
            f"/api/speakers/{speaker.id}", headers=user_headers,
        )
        assert detail.json()["data"]["baseRate"] == 120

    async def test_null_lists_and_names_rejected(
        self, client, seed, user_headers,
    ):
        speaker = await seed.speaker(created_by=10)
        for field in ("modalities", "languages", "firstName", "isActive"):
            resp = await client.put(
                f"/api/speakers/{speaker.id}", json={field: None},
                headers=user_headers,
            )
            assert resp.status_code == 400, field
            assert resp.json()["details"][0]["field"] == field

    async def test_null_optional_field_clears_it(
        self, client, seed, user_headers,
    ):
        speaker = await seed.speaker(created_by=10, short_bio="Exportadora")
        resp = await client.put(
            f"/api/speakers/{speaker.id}", json={"shortBio": None},
            headers=user_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["shortBio"] is None

    async def test_soft_delete_hides_speaker(self, client, seed, user_headers):
        speaker = await seed.speaker(created_by=10)
        resp = await client.delete(
            f"/api/speakers/{speaker.id}", headers=user_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == messages.SPEAKER_DELETED
        resp = await client.get(f"/api/speakers/{speaker.id}")
        assert resp.status_code == 404

    async def test_verify_requires_admin(
        self, client, seed, user_headers, admin_headers,
    ):
        speaker = await seed.speaker(created_by=10)
        resp = await client.post(
            f"/api/speakers/{speaker.id}/verify", headers=user_headers,
        )
        assert resp.status_code == 403

        resp = await client.post(
            f"/api/speakers/{speaker.id}/verify", headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["verifiedBy"] == 1
        assert resp.json()["data"]["verifiedAt"] is not None


# --- Availability -----------------------------------------------------------------

class TestAvailability:
    async def test_end_before_start_rejected(self, client, seed, user_headers):
        speaker = await seed.speaker()
        start = future(5)
        resp = await client.post(
            f"/api/speakers/{speaker.id}/availability",
            json=_block_payload(start, start - timedelta(hours=1)),
            headers=user_headers,
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "VALIDATION_ERROR"
        assert body["message"] == (
            "La fecha de fin debe ser posterior a la fecha de inicio"
        )
        assert body["details"][0]["field"] == "endDate"

    async def test_equal_dates_rejected(self, client, seed, user_headers):
        speaker = await seed.speaker()
        start = future(5)
        resp = await client.post(
            f"/api/speakers/{speaker.id}/availability",
            json=_block_payload(start, start),
            headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == messages.END_AFTER_START

    async def test_block_created_then_overlap_conflicts(
        self, client, seed, user_headers,
    ):
        speaker = await seed.speaker()
        start = future(5)
        resp = await client.post(
            f"/api/speakers/{speaker.id}/availability",
            json=_block_payload(start, start + timedelta(hours=4)),
            headers=user_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["speakerId"] == speaker.id

        resp = await client.post(
            f"/api/speakers/{speaker.id}/availability",
            json=_block_payload(
                start + timedelta(hours=4), start + timedelta(hours=6),
            ),
            headers=user_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "AVAILABILITY_CONFLICT"

    async def test_unknown_speaker(self, client, user_headers):
        start = future(5)
        resp = await client.post(
            "/api/speakers/4242/availability",
            json=_block_payload(start, start + timedelta(hours=1)),
            headers=user_headers,
        )
        assert resp.status_code == 404


# --- Evaluations & stats ----------------------------------------------------------

class TestEvaluations:
    async def test_evaluation_requires_completed_participation(
        self, client, seed, user_headers,
    ):
        speaker = await seed.speaker()
        event = await seed.event()
        resp = await client.post(
            f"/api/speakers/{speaker.id}/evaluate",
            json={"eventId": event.id, "overallRating": 4.5},
            headers=user_headers,
        )
        assert resp.status_code == 409
        assert resp.json()["error"] == "SPEAKER_EVENT_NOT_FOUND"

    async def test_rating_out_of_range(self, client, seed, user_headers):
        speaker = await seed.speaker()
        resp = await client.post(
            f"/api/speakers/{speaker.id}/evaluate",
            json={"eventId": 1, "overallRating": 6},
            headers=user_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "El rating general debe estar entre 1 y 5"

    async def test_completed_participation_updates_rating(
        self, client, seed, user_headers,
    ):
        from tradeconnect.models import SpeakerEvent

        speaker = await seed.speaker()
        event = await seed.event()
        await seed.add(SpeakerEvent(
            speaker_id=speaker.id, event_id=event.id, role="panelist",
            participation_start=future(-3), participation_end=future(-3, 2),
            modality="virtual", status="completed", created_by=10,
        ))
        for rating in (5, 4):
            resp = await client.post(
                f"/api/speakers/{speaker.id}/evaluate",
                json={
                    "eventId": event.id,
                    "overallRating": rating,
                    "criteriaRatings": {"contenido": rating},
                },
                headers=user_headers,
            )
            assert resp.status_code == 201

        resp = await client.get(
            f"/api/speakers/{speaker.id}/stats", headers=user_headers,
        )
        stats = resp.json()["data"]
        assert stats["averageRating"] == 4.5
        assert stats["totalEvaluations"] == 2
        assert stats["completedEvents"] == 1
        assert stats["mostUsedModality"] == "virtual"
        assert stats["ratingDistribution"]["5"] == 1

        detail = (await client.get(f"/api/speakers/{speaker.id}")).json()["data"]
        assert detail["rating"] == 4.5
        assert detail["evaluationStats"]["criteriaAverages"] == {"contenido": 4.5}
