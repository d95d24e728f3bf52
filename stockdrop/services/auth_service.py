from __future__ import annotations

import logging

import httpx

from stockdrop.core.config import settings
from stockdrop.core.errors import AuthenticationError, ConfigurationError, FetchError, ParseError
from stockdrop.schemas.auth import AuthUser, SessionResponse

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or "Authentication failed"
    if isinstance(payload, dict):
        for key in ("msg", "error_description", "message", "error"):
            if payload.get(key):
                return str(payload[key])
    return "Authentication failed"


class AuthService:
    def __init__(
        self,
        url: str | None = None,
        anon_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._anon_key = anon_key
        self._transport = transport

    def _config(self) -> tuple[str, str]:
        url = self._url or settings.supabase_url
        key = self._anon_key or settings.supabase_anon_key
        if not url or not key:
            raise ConfigurationError("Supabase is not configured")
        return url.rstrip("/"), key

    async def _request(self, method: str, path: str, json: dict | None = None, token: str | None = None) -> dict:
        url, key = self._config()
        headers = {"apikey": key, "Authorization": f"Bearer {token or key}"}
        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, transport=self._transport) as client:
                response = await client.request(method, f"{url}/auth/v1{path}", json=json, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Auth backend unreachable: %s", exc)
            raise FetchError("Failed to reach authentication backend", 0, str(exc)) from exc

        if response.status_code >= 500:
            raise FetchError("Authentication backend failed", response.status_code, response.text[:500])
        if response.status_code >= 400:
            raise AuthenticationError(_error_message(response), response.status_code)
        if not response.content:
            return {}

        try:
            payload = response.json()
        except ValueError as exc:
            raise ParseError("Authentication backend returned invalid JSON", response.status_code, str(exc)) from exc
        if not isinstance(payload, dict):
            raise ParseError(f"Authentication backend returned {type(payload).__name__}, expected an object")
        return payload

    def _session(self, payload: dict) -> SessionResponse:
        user = payload.get("user")
        if not isinstance(user, dict):
            user = payload
        return SessionResponse(
            access_token=payload.get("access_token"),
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type") or "bearer",
            expires_in=payload.get("expires_in"),
            user_id=user.get("id"),
            email=user.get("email"),
            confirmation_required=not payload.get("access_token"),
        )

    async def sign_up(self, email: str, password: str) -> SessionResponse:
        payload = await self._request("POST", "/signup", json={"email": email, "password": password})
        logger.info("Registered account for %s", email)
        return self._session(payload)

    async def sign_in(self, email: str, password: str) -> SessionResponse:
        payload = await self._request(
            "POST", "/token?grant_type=password", json={"email": email, "password": password}
        )
        return self._session(payload)

    async def reset_password(self, email: str) -> None:
        await self._request("POST", "/recover", json={"email": email})

    async def get_user(self, access_token: str) -> AuthUser:
        payload = await self._request("GET", "/user", token=access_token)
        if not payload.get("id"):
            raise AuthenticationError("Invalid session")
        return AuthUser(id=payload["id"], email=payload.get("email"))


auth_service = AuthService()
