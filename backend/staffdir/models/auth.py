"""Authentication models for the directory's login endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class SignupRequest(LoginRequest):
    name: str = ""


class LoginResult(BaseModel):
    user: dict[str, Any]
    redirect_to: str | None = None
    session_token: str = ""
