from __future__ import annotations

import pytest

from core.security import create_access_token
from middlewares.auth import TokenVerificationError, current_user_id, verify_token


def test_missing_header_logs_failure(sink_text) -> None:
    with pytest.raises(TokenVerificationError):
        verify_token(None, "/api/me", "GET")

    auth = sink_text("auth")
    assert "Action: token_verification | Identifier: unknown | Result: failure" in auth
    assert '"reason":"Token not provided"' in auth
    assert '"path":"/api/me"' in auth
    assert '"method":"GET"' in auth


def test_non_bearer_header_logs_failure(sink_text) -> None:
    with pytest.raises(TokenVerificationError):
        verify_token("Basic abc", "/api/me", "GET")
    assert "Result: failure" in sink_text("auth")


def test_invalid_token_logs_underlying_reason(sink_text) -> None:
    with pytest.raises(TokenVerificationError) as info:
        verify_token("Bearer not-a-jwt", "/api/me", "GET")

    auth = sink_text("auth")
    assert "Identifier: unknown | Result: failure" in auth
    assert f'"reason":"{info.value.reason}"' in auth
    assert "not-a-jwt" not in auth


def test_expired_token_logs_failure(sink_text) -> None:
    token = create_access_token({"id": "u1", "email": "a@b.com"}, expires_minutes=-1)
    with pytest.raises(TokenVerificationError) as info:
        verify_token(f"Bearer {token}", "/api/me", "GET")
    assert "expired" in info.value.reason.lower()
    assert "Result: failure" in sink_text("auth")


def test_valid_token_logs_success_with_email(sink_text) -> None:
    token = create_access_token({"id": "u1", "email": "a@b.com"})
    payload = verify_token(f"Bearer {token}", "/api/me", "GET")

    assert payload["id"] == "u1"
    auth = sink_text("auth")
    assert "Action: token_verification | Identifier: a@b.com | Result: success" in auth
    assert 'Context: {"path":"/api/me","method":"GET"}' in auth


def test_protected_route_rejects_without_token(client, sink_text) -> None:
    r = client.get("/api/me")
    assert r.status_code == 401
    assert r.json() == {"detail": "Token not provided"}
    assert "Result: failure" in sink_text("auth")


def test_protected_route_rejects_bad_token(client) -> None:
    r = client.get("/api/me", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401
    assert r.json() == {"detail": "Invalid or expired token"}


def test_protected_route_accepts_valid_token(client) -> None:
    token = create_access_token({"id": "u1", "email": "a@b.com"})
    r = client.get("/api/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == {"id": "u1", "email": "a@b.com"}


@pytest.mark.parametrize(
    "state, expected",
    [
        (None, "anonymous"),
        ({}, "anonymous"),
        ({"user": {"id": "u9"}}, "u9"),
        ({"user": {"email": "x@y.z"}}, "anonymous"),
    ],
)
def test_current_user_id(state, expected) -> None:
    assert current_user_id(state) == expected
