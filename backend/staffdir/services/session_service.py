from __future__ import annotations

import logging
from typing import Any

from staffdir.models.auth import LoginRequest, LoginResult, SignupRequest
from staffdir.services.directory_client import LOGIN_PATH, SIGNUP_PATH, DirectoryClient, HttpAttempt, directory_client
from staffdir.services.record_cache import SessionStore, session_store
from staffdir.services.validation import validate_login, validate_signup

logger = logging.getLogger(__name__)

SIGNUP_CONFIRMATION = "Account created successfully! Please log in."


class AuthenticationError(Exception):
    pass


class SessionService:
    def __init__(self, client: DirectoryClient, store: SessionStore) -> None:
        self.client = client
        self.store = store

    def _check(self, attempt: HttpAttempt, fallback: str) -> dict[str, Any]:
        if attempt.status is None:
            raise AuthenticationError(
                f"Failed to connect to server. Make sure backend is running at {self.client.base_url}"
            )
        body = attempt.body if isinstance(attempt.body, dict) else {}
        if not attempt.ok or body.get("success") is False:
            raise AuthenticationError(body.get("error") or fallback)
        return body

    async def login(self, request: LoginRequest) -> LoginResult:
        """Authenticate and open a session whose cache starts as the returned user."""
        validate_login(request)
        attempt = await self.client.request(
            "POST",
            LOGIN_PATH,
            {"email": request.email.strip(), "password": request.password},
        )
        body = self._check(attempt, "Authentication failed")

        user = body.get("user") or body
        token, _ = self.store.open(user)
        logger.info("Logged in as %s", user.get("email") or request.email)
        return LoginResult(user=user, redirect_to=body.get("redirectTo"), session_token=token)

    async def signup(self, request: SignupRequest) -> str:
        validate_signup(request)
        attempt = await self.client.request(
            "POST",
            SIGNUP_PATH,
            {"email": request.email.strip(), "password": request.password, "name": request.name.strip()},
        )
        self._check(attempt, "Signup failed")
        logger.info("Created account for %s", request.email)
        return SIGNUP_CONFIRMATION

    def logout(self, token: str | None) -> None:
        if not self.store.close(token):
            logger.debug("Logout for an unknown or expired session")

    def current_user(self, token: str | None) -> dict[str, Any]:
        cache = self.store.get(token)
        return cache.get() if cache is not None else {}


session_service = SessionService(directory_client, session_store)
