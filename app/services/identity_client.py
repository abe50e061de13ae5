"""
Supabase identity client - PKCE code exchange and the profiles.user_type attribute.

Session and token handling stay with Supabase; this client only performs the
three REST calls the OAuth callback needs.
"""
import base64
import json
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

import httpx

from app.config import Settings
from app.errors import ConfigurationError, UpstreamError
from app.utils.logger import get_logger

logger = get_logger("identity")

EMPLOYER_USER_TYPE = "employer"


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: str


def code_verifier_cookie_name(supabase_url: str) -> str:
    """@supabase/ssr stores the PKCE verifier under sb-<project-ref>-auth-token-code-verifier"""
    project_ref = (urlparse(supabase_url).hostname or "").split(".")[0]
    return f"sb-{project_ref}-auth-token-code-verifier"


def decode_code_verifier(raw: Optional[str]) -> Optional[str]:
    """Cookie values may be "base64-"-prefixed and/or JSON-encoded strings"""
    if not raw:
        return None
    value = raw
    if value.startswith("base64-"):
        encoded = value[len("base64-"):]
        padded = encoded + "=" * (-len(encoded) % 4)
        try:
            value = base64.urlsafe_b64decode(padded).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            return None
    if value.startswith('"'):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return None
    return value or None


class SupabaseIdentityClient:
    """Supabase Auth (GoTrue) + PostgREST over httpx"""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.http_client = http_client

    def _require_config(self) -> None:
        if not self.settings.supabase_url or not self.settings.supabase_anon_key:
            raise ConfigurationError(detail="identity provider is not configured")

    def _headers(self, access_token: Optional[str] = None) -> dict:
        return {
            "apikey": self.settings.supabase_anon_key,
            "Authorization": f"Bearer {access_token or self.settings.supabase_anon_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.settings.supabase_url.rstrip('/')}{path}"
        try:
            if self.http_client is not None:
                response = await self.http_client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.settings.upstream_timeout_seconds) as client:
                    response = await client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                detail=f"Supabase {method} {path} returned {e.response.status_code}: {e.response.text[:300]}",
                upstream_status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(detail=f"Supabase {method} {path} failed: {e}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response, path: str):
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(detail=f"Supabase {path} returned a non-JSON body: {response.text[:300]}") from e

    async def exchange_code_for_session(self, code: str, code_verifier: Optional[str]) -> AuthSession:
        self._require_config()
        if not code_verifier:
            raise UpstreamError(detail="PKCE code verifier cookie is missing")

        response = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "pkce"},
            headers=self._headers(),
            json={"auth_code": code, "code_verifier": code_verifier},
        )
        data = self._json(response, "/auth/v1/token")
        user = data.get("user") if isinstance(data, dict) else None
        if not isinstance(user, dict) or not data.get("access_token") or not user.get("id"):
            raise UpstreamError(detail="Supabase session response has no user")

        logger.info(f"[Auth] Exchanged OAuth code for session (user {user['id']})")
        return AuthSession(access_token=data["access_token"], user_id=user["id"])

    async def get_user_type(self, session: AuthSession) -> Optional[str]:
        response = await self._request(
            "GET",
            "/rest/v1/profiles",
            params={"id": f"eq.{session.user_id}", "select": "user_type"},
            headers=self._headers(session.access_token),
        )
        rows = self._json(response, "/rest/v1/profiles")
        if not isinstance(rows, list):
            raise UpstreamError(detail=f"Supabase profiles returned {type(rows).__name__}, expected a list")
        if not rows:
            return None
        if not isinstance(rows[0], dict):
            raise UpstreamError(detail="Supabase profile row is not an object")
        return rows[0].get("user_type")

    async def set_user_type(self, session: AuthSession, user_type: str) -> None:
        await self._request(
            "PATCH",
            "/rest/v1/profiles",
            params={"id": f"eq.{session.user_id}"},
            headers={**self._headers(session.access_token), "Prefer": "return=minimal"},
            json={"user_type": user_type},
        )
        logger.info(f"[Auth] Updated user {session.user_id} to user_type={user_type}")
