"""
Integration tests for the memory API.

Covers the full request path: auth header -> route -> extractor/processor ->
SQLite, for notes CRUD, extraction preview and conversation processing.
"""

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Auth / Health Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestAuthAndHealth:
    def test_health(self, test_client):
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["services"]["memory_notes"] == "healthy"
        assert data["services"]["inbox"] == "healthy"

    def test_health_degraded_closes_connection(self, test_client, monkeypatch):
        import sqlite3

        from coach.dashboard.backend import main

        class BrokenConnection:
            closed = False

            def execute(self, sql):
                raise sqlite3.OperationalError("disk I/O error")

            def close(self):
                self.closed = True

        broken = BrokenConnection()
        monkeypatch.setitem(main.DATABASES, "inbox", lambda: broken)

        response = test_client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["services"]["inbox"] == "unhealthy"
        assert broken.closed is True

    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/memory/notes"),
            ("get", "/api/memory/process"),
        ],
    )
    def test_requires_user_header(self, test_client, method, path):
        response = getattr(test_client, method)(path)

        assert response.status_code == 401
        assert response.json()["error"] == "Not authorized"
        assert response.json()["code"] == "HTTP_401"

    def test_blank_user_header(self, test_client):
        response = test_client.get("/api/memory/notes", headers={"X-User-ID": "  "})
        assert response.status_code == 401


# ─────────────────────────────────────────────────────────────────────────────
# Notes CRUD Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestNotesEndpoints:
    """Tests for /api/memory/notes."""

    def _create(self, client, headers, **body):
        payload = {"content": "Correr un maratón", "category": "goals", **body}
        response = client.post("/api/memory/notes", json=payload, headers=headers)
        assert response.status_code == 201
        return response.json()["note"]

    def test_create_and_list(self, test_client, auth_headers, mock_user_id):
        note = self._create(test_client, auth_headers, priority=7, tags=["goals"])

        assert note["user_id"] == mock_user_id
        assert note["priority"] == 7

        response = test_client.get("/api/memory/notes", headers=auth_headers)
        assert response.status_code == 200
        notes = response.json()["notes"]
        assert [n["id"] for n in notes] == [note["id"]]
        assert response.json()["stats"] is None

    def test_list_with_stats(self, test_client, auth_headers):
        self._create(test_client, auth_headers)
        self._create(test_client, auth_headers, content="Llamar al banco", category="reminders")

        response = test_client.get(
            "/api/memory/notes", params={"include_stats": True}, headers=auth_headers
        )
        stats = response.json()["stats"]

        assert stats["total_notes"] == 2
        assert stats["categories"] == {"goals": 1, "reminders": 1}

    def test_list_filters(self, test_client, auth_headers):
        self._create(test_client, auth_headers)
        self._create(test_client, auth_headers, content="Llamar al banco", category="reminders")

        by_category = test_client.get(
            "/api/memory/notes", params={"category": "reminders"}, headers=auth_headers
        ).json()["notes"]
        by_search = test_client.get(
            "/api/memory/notes", params={"search": "maratón"}, headers=auth_headers
        ).json()["notes"]

        assert [n["content"] for n in by_category] == ["Llamar al banco"]
        assert [n["content"] for n in by_search] == ["Correr un maratón"]

    def test_notes_are_private(self, test_client, auth_headers, other_auth_headers):
        self._create(test_client, auth_headers)

        response = test_client.get("/api/memory/notes", headers=other_auth_headers)
        assert response.json()["notes"] == []

    def test_create_validation(self, test_client, auth_headers):
        empty = test_client.post("/api/memory/notes", json={"content": "  "}, headers=auth_headers)
        bad_category = test_client.post(
            "/api/memory/notes", json={"content": "x", "category": "recipes"}, headers=auth_headers
        )

        assert empty.status_code == 400
        assert empty.json()["error"] == "content is required"
        assert bad_category.status_code == 400

    def test_create_clamps_priority(self, test_client, auth_headers):
        note = self._create(test_client, auth_headers, priority=42)
        assert note["priority"] == 10

    def test_update(self, test_client, auth_headers):
        note = self._create(test_client, auth_headers)

        response = test_client.put(
            "/api/memory/notes",
            json={"id": note["id"], "status": "completed", "title": "Maratón"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        updated = response.json()["note"]
        assert updated["status"] == "completed"
        assert updated["title"] == "Maratón"
        assert updated["content"] == "Correr un maratón"

    def test_update_invalid_status(self, test_client, auth_headers):
        note = self._create(test_client, auth_headers)

        response = test_client.put(
            "/api/memory/notes", json={"id": note["id"], "status": "gone"}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid status: gone"

    def test_update_other_users_note(self, test_client, auth_headers, other_auth_headers):
        note = self._create(test_client, auth_headers)

        response = test_client.put(
            "/api/memory/notes", json={"id": note["id"], "content": "x"}, headers=other_auth_headers
        )
        assert response.status_code == 404

    def test_delete(self, test_client, auth_headers):
        note = self._create(test_client, auth_headers)

        response = test_client.delete(
            "/api/memory/notes", params={"id": note["id"]}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Note deleted"}

        again = test_client.delete(
            "/api/memory/notes", params={"id": note["id"]}, headers=auth_headers
        )
        assert again.status_code == 404

    def test_delete_requires_id(self, test_client, auth_headers):
        response = test_client.delete("/api/memory/notes", headers=auth_headers)
        assert response.status_code == 422


# ─────────────────────────────────────────────────────────────────────────────
# Extraction / Processing Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestExtractEndpoint:
    def test_preview_stores_nothing(self, test_client, auth_headers, reminder_message):
        response = test_client.post(
            "/api/memory/extract",
            json={"user_message": reminder_message, "coach_response": "Te sugiero llegar temprano"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        first = data["extractions"][0]
        assert first["shouldStore"] is True
        assert first["category"] == "reminders"
        assert first["priority"] == 9
        assert first["metadata"]["reminderDate"] == "mañana"

        notes = test_client.get("/api/memory/notes", headers=auth_headers).json()["notes"]
        assert notes == []

    def test_small_talk(self, test_client, auth_headers):
        response = test_client.post(
            "/api/memory/extract", json={"user_message": "hola"}, headers=auth_headers
        )
        assert response.json() == {"extractions": [], "total": 0}


class TestProcessEndpoint:
    """Tests for /api/memory/process."""

    def test_process_stores_notes(self, test_client, auth_headers, goal_message):
        response = test_client.post(
            "/api/memory/process",
            json={"user_message": goal_message, "coach_response": "Te sugiero empezar suave"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Processing complete"
        assert body["results"]["total_extractions"] == 2
        assert body["results"]["saved_notes"] == 2
        assert body["results"]["skipped"] == 0

        notes = test_client.get("/api/memory/notes", headers=auth_headers).json()["notes"]
        assert {n["category"] for n in notes} == {"goals", "reminders"}

    def test_process_requires_message(self, test_client, auth_headers):
        response = test_client.post(
            "/api/memory/process", json={"user_message": " "}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["error"] == "user_message is required"

    def test_process_missing_field(self, test_client, auth_headers):
        response = test_client.post("/api/memory/process", json={}, headers=auth_headers)
        assert response.status_code == 422

    def test_processing_stats(self, test_client, auth_headers, mock_user_id, goal_message):
        from coach.memory.processor import ingest_turn

        ingest_turn(mock_user_id, goal_message)
        ingest_turn(mock_user_id, "gracias")

        response = test_client.get("/api/memory/process", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["stats"] == {
            "total_interactions": 2,
            "processed_interactions": 1,
            "processing_rate": 50,
        }
        assert len(body["recent_memories"]) == 1

    def test_pending_interactions(self, test_client, auth_headers, mock_user_id, goal_message):
        from coach.memory.processor import ingest_turn

        ingest_turn(mock_user_id, goal_message)
        ingest_turn(mock_user_id, "gracias")

        response = test_client.get(
            "/api/memory/process", params={"process_pending": True}, headers=auth_headers
        )
        body = response.json()

        assert [p["content"] for p in body["pending_interactions"]] == ["gracias"]
        assert body["message"] == "1 interactions pending processing"
