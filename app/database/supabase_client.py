import base64
from typing import Dict, List, Mapping, Optional

from starlette.responses import Response
from supabase import create_client, Client, ClientOptions
from supabase_auth import SyncSupportedStorage

from app.config import settings


CHUNK_SIZE = 3180
BASE64_PREFIX = "base64-"


def encode_cookie_value(value: str) -> str:
    """base64url so the serialized session is never quoted or escaped in the header"""
    encoded = base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii").rstrip("=")
    return BASE64_PREFIX + encoded


def decode_cookie_value(value: str) -> str:
    if not value.startswith(BASE64_PREFIX):
        return value
    encoded = value[len(BASE64_PREFIX):]
    encoded += "=" * (-len(encoded) % 4)
    return base64.urlsafe_b64decode(encoded).decode("utf-8")


class CookieStorage(SyncSupportedStorage):
    """Auth storage backed by the request's cookies.

    The auth client reads its session (and the PKCE code verifier) from here and writes
    refreshed or cleared values back. Writes are kept in `pending` until `apply` copies
    them onto the outgoing response. Values longer than CHUNK_SIZE are split across
    `<key>.0`, `<key>.1`, ... so no single cookie approaches the browser's 4096 byte limit.
    """

    def __init__(self, cookies: Mapping[str, str]):
        self._cookies: Dict[str, str] = dict(cookies)
        self.pending: Dict[str, Optional[str]] = {}

    def _chunk_names(self, key: str) -> List[str]:
        names = []
        while f"{key}.{len(names)}" in self._cookies:
            names.append(f"{key}.{len(names)}")
        return names

    def _write(self, name: str, value: Optional[str]) -> None:
        if value is None:
            self._cookies.pop(name, None)
        else:
            self._cookies[name] = value
        self.pending[name] = value

    def get_item(self, key: str) -> Optional[str]:
        if key in self._cookies:
            return decode_cookie_value(self._cookies[key])
        chunks = [self._cookies[name] for name in self._chunk_names(key)]
        if not chunks:
            return None
        return decode_cookie_value("".join(chunks))

    def set_item(self, key: str, value: str) -> None:
        self.remove_item(key)
        encoded = encode_cookie_value(value)
        if len(encoded) <= CHUNK_SIZE:
            self._write(key, encoded)
            return
        for index, start in enumerate(range(0, len(encoded), CHUNK_SIZE)):
            self._write(f"{key}.{index}", encoded[start:start + CHUNK_SIZE])

    def remove_item(self, key: str) -> None:
        for name in [key] + self._chunk_names(key):
            if name in self._cookies:
                self._write(name, None)

    def apply(self, response: Response) -> None:
        for key, value in self.pending.items():
            if value is None:
                response.delete_cookie(key, path="/")
                continue
            response.set_cookie(
                key,
                value,
                max_age=settings.session_cookie_max_age,
                path="/",
                httponly=True,
                samesite="lax",
                secure=settings.cookie_secure,
            )


class SupabaseClient:
    """Builds request-scoped clients. No client outlives the request it was created for."""

    @classmethod
    def for_request(cls, storage: CookieStorage) -> Client:
        options = ClientOptions(
            storage=storage,
            persist_session=True,
            auto_refresh_token=False,
            flow_type="pkce",
        )
        return create_client(settings.supabase_url, settings.supabase_key, options=options)

    @classmethod
    def service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use in scripts only."""
        if not settings.supabase_service_role_key:
            raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY is not configured")
        return create_client(settings.supabase_url, settings.supabase_service_role_key)


def create_request_client(storage: CookieStorage) -> Client:
    return SupabaseClient.for_request(storage)
