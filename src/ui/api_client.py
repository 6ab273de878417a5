"""
Synchronous HTTP client for the Rant to Reflection backend API.

Uses ``httpx.Client`` (sync) because Streamlit scripts run synchronously.
"""

import logging
from urllib.parse import urlencode

import httpx
import streamlit as st

logger = logging.getLogger(__name__)


class APIError(Exception):
    """User-friendly API error with categorized message.

    Categories: "connection", "timeout", "auth", "http", "network", "unknown".
    Used by the UI to display appropriate error messages.
    """

    def __init__(self, message: str, category: str = "unknown", status_code: int | None = None):
        self.message = message
        self.category = category
        self.status_code = status_code
        super().__init__(message)


class APIClient:
    """Thin synchronous wrapper around httpx for calling the FastAPI backend.

    All methods return parsed JSON (or raw bytes for audio) or raise
    ``APIError`` with user-friendly messages for display in the UI.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Base URL of the FastAPI backend.
            token: Bearer session token of the signed-in user, if any.
            transport: Optional httpx transport (used in tests).
        """
        self._base_url = base_url.rstrip("/")
        self._token = token
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.Client(
            base_url=self._base_url, headers=headers, timeout=30.0, transport=transport
        )

    @property
    def token(self) -> str | None:
        return self._token

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request with user-friendly error handling.

        Raises:
            APIError: On connection, timeout, HTTP status, or network errors.
        """
        try:
            resp = getattr(self._client, method)(path, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.ConnectError:
            raise APIError(
                "Backend server is not running. "
                "Start it with: `uvicorn src.api.app:app --reload --port 8000`",
                category="connection",
            ) from None
        except httpx.TimeoutException:
            raise APIError(
                "Request timed out. The server may be overloaded.",
                category="timeout",
            ) from None
        except httpx.HTTPStatusError as exc:
            try:
                detail = exc.response.json().get("detail", exc.response.text)
            except ValueError:
                detail = exc.response.text or str(exc)
            status = exc.response.status_code
            category = "auth" if status == 401 else "http"
            raise APIError(str(detail), category=category, status_code=status) from None
        except httpx.HTTPError as exc:
            raise APIError(f"Network error: {exc}", category="network") from None

    # -- health --

    def health_check(self) -> dict:
        return self._request("get", "/health").json()

    def check_connection(self) -> tuple[bool, str]:
        """Check if the backend is reachable. Returns (ok, message)."""
        try:
            self.health_check()
            return True, "Connected"
        except APIError as exc:
            return False, exc.message

    # -- auth --

    def signup(self, email: str, password: str) -> dict:
        body = {"email": email, "password": password}
        return self._request("post", "/api/v1/auth/signup", json=body).json()

    def login(self, email: str, password: str) -> dict:
        body = {"email": email, "password": password}
        return self._request("post", "/api/v1/auth/login", json=body).json()

    def logout(self) -> None:
        self._request("post", "/api/v1/auth/logout")

    def me(self) -> dict:
        return self._request("get", "/api/v1/auth/me").json()

    # -- rants --

    def create_rant(
        self,
        title: str,
        is_private: bool = False,
        anonymous: bool = False,
        audio: bytes | None = None,
        filename: str = "rant.wav",
    ) -> dict:
        data = {
            "title": title,
            "is_private": str(is_private).lower(),
            "anonymous": str(anonymous).lower(),
        }
        files = {"audio": (filename, audio, "audio/wav")} if audio else None
        return self._request("post", "/api/v1/rants", data=data, files=files).json()

    def list_rants(
        self,
        sort: str = "latest",
        time_range: str = "all",
        limit: int = 50,
        offset: int = 0,
    ) -> list[dict]:
        params = {"sort": sort, "range": time_range, "limit": limit, "offset": offset}
        return self._request("get", "/api/v1/rants", params=params).json()

    def list_my_rants(self, limit: int = 50, offset: int = 0) -> list[dict]:
        params = {"limit": limit, "offset": offset}
        return self._request("get", "/api/v1/rants/mine", params=params).json()

    def get_rant(self, rant_id: str) -> dict:
        return self._request("get", f"/api/v1/rants/{rant_id}").json()

    def delete_rant(self, rant_id: str) -> dict:
        return self._request("delete", f"/api/v1/rants/{rant_id}").json()

    # -- audio --

    def download_audio(self, rant_id: str) -> bytes | None:
        """Fetch raw audio bytes for a rant. Returns None on error."""
        try:
            return self._request("get", f"/api/v1/rants/{rant_id}/audio").content
        except APIError:
            return None

    # -- comments --

    def list_comments(self, rant_id: str) -> list[dict]:
        return self._request("get", f"/api/v1/rants/{rant_id}/comments").json()

    def create_comment(
        self,
        rant_id: str,
        text: str,
        parent_id: str | None = None,
        anonymous: bool = False,
    ) -> dict:
        body: dict = {"text": text, "anonymous": anonymous}
        if parent_id:
            body["parent_id"] = parent_id
        return self._request("post", f"/api/v1/rants/{rant_id}/comments", json=body).json()

    def delete_comment(self, comment_id: str) -> None:
        self._request("delete", f"/api/v1/comments/{comment_id}")

    def toggle_like(self, comment_id: str) -> dict:
        return self._request("post", f"/api/v1/comments/{comment_id}/like").json()

    # -- speech --

    def transcribe(self, rant_id: str) -> dict:
        return self._request(
            "post", "/api/v1/speech/transcribe", json={"rant_id": rant_id}, timeout=120.0
        ).json()

    def text_to_speech(self, rant_id: str) -> bytes:
        return self._request(
            "get", "/api/v1/speech/tts", params={"id": rant_id}, timeout=120.0
        ).content

    def record_ws_url(self, title: str, is_private: bool = False, anonymous: bool = False) -> str:
        """Build the ``/ws/record`` URL for the signed-in user."""
        scheme = "wss" if self._base_url.startswith("https://") else "ws"
        host = self._base_url.split("://", 1)[-1]
        query = urlencode(
            {
                "token": self._token or "",
                "title": title,
                "is_private": str(is_private).lower(),
                "anonymous": str(anonymous).lower(),
            }
        )
        return f"{scheme}://{host}/ws/record?{query}"


@st.cache_resource
def get_api_client(base_url: str = "http://localhost:8000", token: str | None = None) -> APIClient:
    """Return a cached APIClient, keyed by base_url and session token.

    Uses Streamlit's ``cache_resource`` to persist the client across reruns.
    Signing in or out changes the token, which yields a new client.
    """
    return APIClient(base_url=base_url, token=token)
