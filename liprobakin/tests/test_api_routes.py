"""
Unit tests for the API endpoints.
Service calls are monkeypatched so no database is needed.
"""
import pytest
from fastapi.testclient import TestClient

from liprobakin.api.main import app
from liprobakin.services import (
    admin_service,
    audit_service,
    auth_service,
    game_service,
    standings_service,
    team_service,
    user_service,
    verification_service,
)
from liprobakin.services.admin_service import ConflictError
from liprobakin.services.permission_service import merge_permissions


# ============================================================================
# Test Fixtures and Helpers
# ============================================================================

USER = {
    "id": 1,
    "email": "jean@liprobakin.cd",
    "first_name": "Jean",
    "last_name": "Mukendi",
    "phone_number": None,
    "verification_status": None,
}


def make_client_with_auth(monkeypatch, roles=None, is_active=True, user_id=1):
    """Authenticated client; ``roles`` makes the user an admin holding them."""
    def fake_verify_token(token):
        return {"user_id": user_id, "email": USER["email"]}

    async def fake_get_user_by_id(session, uid):
        return dict(USER, id=uid)

    async def fake_get_admin_by_user_id(session, uid):
        if roles is None:
            return None
        return {
            "id": 10,
            "user_id": uid,
            "email": USER["email"],
            "display_name": "Jean",
            "roles": roles,
            "permissions": merge_permissions(roles),
            "is_first_login": False,
            "is_active": is_active,
        }

    monkeypatch.setattr(auth_service, "verify_token", fake_verify_token, raising=True)
    monkeypatch.setattr(user_service, "get_user_by_id", fake_get_user_by_id, raising=True)
    monkeypatch.setattr(admin_service, "get_admin_by_user_id", fake_get_admin_by_user_id, raising=True)

    return TestClient(app), {"Authorization": "Bearer dummy"}


@pytest.fixture
def audit_calls(monkeypatch):
    calls = []

    async def fake_log(session, action, user_id, user_email, target_type, target_id=None, target_name=None, details=None):
        calls.append({"action": action, "user_id": user_id, "target_type": target_type, "target_id": target_id})
        return True

    monkeypatch.setattr(audit_service, "log_audit_action", fake_log, raising=True)
    return calls


# ============================================================================
# Health / Auth
# ============================================================================

def test_health():
    client = TestClient(app)
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "message": "API is running"}


def test_me_requires_token():
    client = TestClient(app)
    response = client.get("/api/auth/me")
    assert response.status_code in (401, 403)


def test_me_rejects_invalid_token(monkeypatch):
    monkeypatch.setattr(auth_service, "verify_token", lambda token: None, raising=True)
    client = TestClient(app)
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_get_me(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch)
    response = client.get("/api/auth/me", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["first_name"] == "Jean"
    assert body["last_name"] == "Mukendi"


def test_signup_success(monkeypatch):
    client = TestClient(app)
    created = {}

    async def fake_get_user_by_email(session, email):
        return None

    async def fake_create_user(session, **kwargs):
        created.update(kwargs)
        return 42

    async def fake_get_user_by_id(session, uid):
        return dict(USER, id=uid, email=created["email"])

    async def fake_create_refresh_token(session, user_id, token, expires_at):
        return None

    monkeypatch.setattr(user_service, "get_user_by_email", fake_get_user_by_email, raising=True)
    monkeypatch.setattr(user_service, "create_user", fake_create_user, raising=True)
    monkeypatch.setattr(user_service, "get_user_by_id", fake_get_user_by_id, raising=True)
    monkeypatch.setattr(user_service, "create_refresh_token", fake_create_refresh_token, raising=True)

    payload = {
        "email": "  Jean@Liprobakin.CD ",
        "password": "secret123",
        "first_name": "Jean",
        "last_name": "Mukendi",
    }
    response = client.post("/api/auth/signup", json=payload)
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["user_id"] == 42
    assert body["email"] == "jean@liprobakin.cd"
    assert body["is_admin"] is False
    assert auth_service.verify_token(body["access_token"])["user_id"] == 42
    assert created["first_name"] == "Jean"
    assert created["password_hash"] != "secret123"


def test_signup_duplicate_email(monkeypatch):
    client = TestClient(app)

    async def fake_get_user_by_email(session, email):
        return dict(USER)

    monkeypatch.setattr(user_service, "get_user_by_email", fake_get_user_by_email, raising=True)
    payload = {"email": "jean@liprobakin.cd", "password": "secret123", "first_name": "Jean", "last_name": "M"}
    response = client.post("/api/auth/signup", json=payload)
    assert response.status_code == 400


# ============================================================================
# Permission checks
# ============================================================================

def test_non_admin_gets_403(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=None)
    response = client.get("/api/admin/me", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"


def test_deactivated_admin_gets_403(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["master"], is_active=False)
    response = client.get("/api/admin/me", headers=headers)
    assert response.status_code == 403


def test_admin_me_returns_merged_permissions(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["news_editor", "game_scheduler"])
    response = client.get("/api/admin/me", headers=headers)
    assert response.status_code == 200
    permissions = response.json()["permissions"]
    assert permissions["can_manage_news"] is True
    assert permissions["can_manage_games"] is True
    assert permissions["can_manage_teams"] is False


def test_missing_permission_blocks_team_creation(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["news_editor"])
    response = client.post("/api/teams", json={"name": "AS Vita Club", "gender": "men"}, headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Missing permission: can_manage_teams"


def test_team_manager_creates_team_and_audits(monkeypatch, audit_calls):
    client, headers = make_client_with_auth(monkeypatch, roles=["team_manager"])

    async def fake_create_team(session, **kwargs):
        return {"id": 5, "name": kwargs["name"], "slug": "as-vita-club", "gender": kwargs["gender"]}

    monkeypatch.setattr(team_service, "create_team", fake_create_team, raising=True)
    response = client.post("/api/teams", json={"name": "AS Vita Club", "gender": "men"}, headers=headers)

    assert response.status_code == 200
    assert response.json()["slug"] == "as-vita-club"
    assert audit_calls == [{"action": "team_created", "user_id": 1, "target_type": "team", "target_id": 5}]


def test_team_creation_validates_gender(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["master"])
    response = client.post("/api/teams", json={"name": "AS Vita Club", "gender": "mixed"}, headers=headers)
    assert response.status_code == 422


# ============================================================================
# Games
# ============================================================================

def test_complete_game_rejects_tie_payload(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["game_scheduler"])
    response = client.post("/api/games/1/complete", json={"home_score": 70, "away_score": 70}, headers=headers)
    assert response.status_code == 422


def test_complete_game_maps_service_errors(monkeypatch, audit_calls):
    client, headers = make_client_with_auth(monkeypatch, roles=["game_scheduler"])

    async def fake_complete_game(session, game_id, home_score, away_score):
        raise ValueError("Game is already completed")

    monkeypatch.setattr(game_service, "complete_game", fake_complete_game, raising=True)
    response = client.post("/api/games/1/complete", json={"home_score": 80, "away_score": 70}, headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Game is already completed"
    assert audit_calls == []


def test_box_score_rejects_made_over_attempted(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["game_scheduler"])
    payload = {"player_stats": [{"player_id": 1, "team_id": 1, "two_pm": 5, "two_pa": 3}]}
    response = client.put("/api/games/1/box-score", json=payload, headers=headers)
    assert response.status_code == 422


# ============================================================================
# Admin users
# ============================================================================

def test_create_admin_conflict_is_409(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["master"])

    async def fake_create_admin_user(session, acting_admin, email, display_name, password, roles):
        raise ConflictError(f"An account with email {email} already exists")

    monkeypatch.setattr(admin_service, "create_admin_user", fake_create_admin_user, raising=True)
    payload = {"email": "grace@liprobakin.cd", "display_name": "Grace", "password": "secret1", "roles": ["news_editor"]}
    response = client.post("/api/admin/users", json=payload, headers=headers)
    assert response.status_code == 409


def test_create_admin_by_non_master_is_403(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["league_manager"])

    async def fake_create_admin_user(session, acting_admin, email, display_name, password, roles):
        raise PermissionError("Only master admins can manage admin users")

    monkeypatch.setattr(admin_service, "create_admin_user", fake_create_admin_user, raising=True)
    payload = {"email": "grace@liprobakin.cd", "display_name": "Grace", "password": "secret1", "roles": ["news_editor"]}
    response = client.post("/api/admin/users", json=payload, headers=headers)
    assert response.status_code == 403


# ============================================================================
# Verification review
# ============================================================================

def test_review_requires_player_permission(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["news_editor"])
    response = client.post(
        "/api/admin/verifications/3/review", json={"decision": "approved"}, headers=headers
    )
    assert response.status_code == 403


def test_review_rejects_unknown_decision(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["team_manager"])
    response = client.post(
        "/api/admin/verifications/3/review", json={"decision": "maybe"}, headers=headers
    )
    assert response.status_code == 422


def test_review_returns_refreshed_pending_list(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["team_manager"])
    reviewed = []

    async def fake_review(session, request_id, decision, reviewer, notes=None):
        reviewed.append((request_id, decision, reviewer["email"], notes))
        return {}

    async def fake_list_pending(session):
        return []

    monkeypatch.setattr(verification_service, "review_request", fake_review, raising=True)
    monkeypatch.setattr(verification_service, "list_pending_requests", fake_list_pending, raising=True)

    response = client.post(
        "/api/admin/verifications/3/review",
        json={"decision": "rejected", "notes": "Blurry photo"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == []
    assert reviewed == [(3, "rejected", "jean@liprobakin.cd", "Blurry photo")]


@pytest.mark.parametrize(
    "error,status",
    [
        (ValueError("Verification request has already been approved"), 400),
        (LookupError("Verification request not found"), 404),
        (PermissionError("Not authorized"), 403),
        (RuntimeError("boom"), 500),
    ],
)
def test_review_maps_errors(monkeypatch, error, status):
    client, headers = make_client_with_auth(monkeypatch, roles=["team_manager"])

    async def fake_review(session, request_id, decision, reviewer, notes=None):
        raise error

    monkeypatch.setattr(verification_service, "review_request", fake_review, raising=True)
    response = client.post(
        "/api/admin/verifications/3/review", json={"decision": "approved"}, headers=headers
    )
    assert response.status_code == status


# ============================================================================
# Public endpoints
# ============================================================================

def test_public_standings(monkeypatch):
    client = TestClient(app)
    seen = {}

    async def fake_get_standings(session, gender=None):
        seen["gender"] = gender
        return {
            "men": [
                {
                    "seed": 1,
                    "team_id": 5,
                    "team_name": "AS Vita Club",
                    "gender": "men",
                    "wins": 3,
                    "losses": 1,
                    "games_played": 4,
                    "total_points": 310,
                    "league_points": 7,
                }
            ]
        }

    monkeypatch.setattr(standings_service, "get_standings", fake_get_standings, raising=True)
    response = client.get("/api/public/standings?gender=men")

    assert response.status_code == 200
    assert response.headers["Cache-Control"].startswith("public")
    assert response.json()["standings"]["men"][0]["league_points"] == 7
    assert seen["gender"] == "men"


def test_public_standings_rejects_unknown_division():
    client = TestClient(app)
    response = client.get("/api/public/standings?gender=mixed")
    assert response.status_code == 422


def test_public_team_not_found(monkeypatch):
    client = TestClient(app)

    async def fake_get_public_team(session, slug):
        return None

    monkeypatch.setattr(team_service, "get_public_team", fake_get_public_team, raising=True)
    response = client.get("/api/public/teams/no-such-team")
    assert response.status_code == 404


def test_public_game_log_missing_player(monkeypatch):
    client = TestClient(app)

    async def fake_game_log(session, player_id):
        raise LookupError("Player not found")

    monkeypatch.setattr(team_service, "get_player_game_log", fake_game_log, raising=True)
    response = client.get("/api/public/players/99/game-log")
    assert response.status_code == 404


# ============================================================================
# Later additions
# ============================================================================

def test_delete_completed_game_is_400(monkeypatch, audit_calls):
    client, headers = make_client_with_auth(monkeypatch, roles=["game_scheduler"])

    async def fake_delete_game(session, game_id):
        raise ValueError("Completed games cannot be deleted")

    monkeypatch.setattr(game_service, "delete_game", fake_delete_game, raising=True)
    response = client.delete("/api/games/1", headers=headers)
    assert response.status_code == 400
    assert audit_calls == []


def test_get_verification_request(monkeypatch):
    client, headers = make_client_with_auth(monkeypatch, roles=["team_manager"])

    async def fake_get_request(session, request_id):
        if request_id != 3:
            return None
        return {
            "id": 3,
            "user_id": 1,
            "user_first_name": "Jean",
            "user_last_name": "Mukendi",
            "role": "player",
            "id_image_url": "https://bucket/verification/1/1.jpg",
            "status": "approved",
            "reviewed_by": "reviewer@liprobakin.cd",
        }

    monkeypatch.setattr(verification_service, "get_request", fake_get_request, raising=True)

    response = client.get("/api/admin/verifications/3", headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    assert client.get("/api/admin/verifications/4", headers=headers).status_code == 404
