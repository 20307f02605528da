"""HTTP client for the remote asset catalog service."""

from __future__ import annotations

import logging
import mimetypes
import urllib.parse
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from ..catalog.models import Asset, UploadOutcome
from ..config import get_config
from ..errors import (
    AuthenticationRequired,
    NetworkFailure,
    NotFound,
    ValidationFailure,
)
from .downloads import DownloadDescriptor, resolve_download_name

__all__ = ["CatalogClient", "Session", "USER_AGENT"]

logger = logging.getLogger(__name__)

USER_AGENT = "arvr-assets-client/0.1"
"""User agent reported to the catalog service."""

_CHUNK_SIZE = 8192


@dataclass(frozen=True, slots=True)
class Session:
    """Credentials returned by a successful login."""

    token: str
    user_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)


UploadSource = Path | str | tuple[str, bytes]


class CatalogClient:
    """Talk to the catalog service on behalf of a (possibly anonymous) user.

    Parameters
    ----------
    base_url:
        Root of the catalog service. Defaults to the configured host.
    token:
        Bearer token of the signed-in user. Anonymous clients may still
        resolve public links and download public assets.
    session:
        Optional :class:`requests.Session` (or compatible object) used for
        all requests, mainly to inject fakes in tests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        config = get_config()
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.token = token or None
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    # ------------------------------------------------------------------
    # Catalog operations
    # ------------------------------------------------------------------
    def list_assets(self) -> list[Asset]:
        """Return the catalog visible to the signed-in user."""

        payload = self._get_json("assets", authenticated=True)
        if not isinstance(payload, list):
            raise NetworkFailure("Unexpected response while fetching assets")
        return [Asset.from_payload(item) for item in payload]

    def resolve_public_asset(self, token: str) -> Asset:
        """Return the asset shared under *token*, including its payload."""

        token = (token or "").strip()
        if not token:
            raise ValidationFailure("Please enter a shared link")
        quoted = urllib.parse.quote(token, safe="")
        payload = self._get_json(f"assets/public/{quoted}", authenticated=False)
        if not isinstance(payload, Mapping):
            raise NetworkFailure("Unexpected response while fetching asset")
        return Asset.from_payload(payload)

    def upload_asset(
        self,
        source: UploadSource | None,
        *,
        category: str,
        is_public: bool = False,
    ) -> UploadOutcome:
        """Upload *source* into *category* and return the service verdict."""

        filename, data = self._read_upload_source(source)
        self._require_token()

        mime_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"
        response = self._make_request(
            "POST",
            "upload",
            authenticated=True,
            files={"file": (filename, data, mime_type)},
            data={"isPublic": "true" if is_public else "false", "category": category},
        )
        payload = self._decode_json(response)
        if not isinstance(payload, Mapping):
            raise NetworkFailure("Unexpected response while uploading file")
        outcome = UploadOutcome.from_response(payload)
        logger.info(
            "Uploaded %s to %s (duplicate=%s)",
            filename,
            category,
            outcome.duplicate,
        )
        return outcome

    def delete_asset(self, asset_id: str) -> None:
        """Delete the asset identified by *asset_id*."""

        self._require_token()
        quoted = urllib.parse.quote(str(asset_id), safe="")
        self._make_request("DELETE", f"assets/{quoted}", authenticated=True)
        logger.info("Deleted asset %s", asset_id)

    def download_asset(self, asset_id: str) -> DownloadDescriptor:
        """Start streaming the stored binary for *asset_id*."""

        quoted = urllib.parse.quote(str(asset_id), safe="")
        response = self._make_request(
            "GET",
            f"download/{quoted}",
            authenticated=bool(self.token),
            stream=True,
        )
        filename, extension = resolve_download_name(response.headers)
        return DownloadDescriptor(
            filename=filename,
            extension=extension,
            stream=response.iter_content(chunk_size=_CHUNK_SIZE),
            close=response.close,
        )

    def fetch_payload(self, asset_id: str) -> bytes:
        """Return the full binary for *asset_id* in memory."""

        quoted = urllib.parse.quote(str(asset_id), safe="")
        response = self._make_request(
            "GET",
            f"download/{quoted}",
            authenticated=bool(self.token),
        )
        return response.content

    def share_url(self, asset: Asset) -> str | None:
        """Return the public link for *asset* when it carries a share token."""

        if not asset.share_token:
            return None
        quoted = urllib.parse.quote(asset.share_token, safe="")
        return f"{self.base_url}/assets/public/{quoted}"

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def login(self, username: str, password: str) -> Session:
        """Exchange credentials for a session token."""

        if not username.strip() or not password:
            raise ValidationFailure("Username and password are required")
        response = self._make_request(
            "POST",
            "login",
            authenticated=False,
            json={"username": username.strip(), "password": password},
        )
        payload = self._decode_json(response)
        token = payload.get("token") if isinstance(payload, Mapping) else None
        if not token:
            raise NetworkFailure("Error logging in")
        user_id = payload.get("userid")
        session = Session(token=str(token), user_id=str(user_id) if user_id is not None else None)
        self.token = session.token
        return session

    def signup(self, username: str, password: str, email: str) -> str:
        """Create an account and return the service confirmation message."""

        if not username.strip() or not password or not email.strip():
            raise ValidationFailure("Email, username and password are required")
        response = self._make_request(
            "POST",
            "signup",
            authenticated=False,
            json={
                "username": username.strip(),
                "password": password,
                "email": email.strip(),
            },
        )
        payload = self._decode_json(response)
        message = payload.get("message") if isinstance(payload, Mapping) else None
        return str(message or "Signed up successfully")

    # ------------------------------------------------------------------
    # Request helpers
    # ------------------------------------------------------------------
    def _require_token(self) -> None:
        if not self.token:
            raise AuthenticationRequired()

    def _url(self, endpoint: str) -> str:
        return urllib.parse.urljoin(f"{self.base_url}/", endpoint.lstrip("/"))

    def _make_request(
        self,
        method: str,
        endpoint: str,
        *,
        authenticated: bool,
        **kwargs: Any,
    ) -> requests.Response:
        """Make an API request and translate failures into client errors."""

        headers = dict(kwargs.pop("headers", None) or {})
        if authenticated:
            self._require_token()
            headers["Authorization"] = f"Bearer {self.token}"

        url = self._url(endpoint)
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkFailure(str(exc) or "Network request failed") from exc

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.warning("%s %s returned %s: %s", method, url, response.status_code, message)
            if response.status_code == 404:
                raise NotFound(message, status_code=response.status_code)
            raise NetworkFailure(message, status_code=response.status_code)
        return response

    def _get_json(self, endpoint: str, *, authenticated: bool) -> Any:
        response = self._make_request("GET", endpoint, authenticated=authenticated)
        return self._decode_json(response)

    @staticmethod
    def _decode_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkFailure("Malformed response from the catalog service") from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str | None:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, Mapping):
            message = payload.get("message") or payload.get("error")
            if message:
                return str(message)
        reason = getattr(response, "reason", None)
        return f"Request failed with status {response.status_code}" + (f" ({reason})" if reason else "")

    @staticmethod
    def _read_upload_source(source: UploadSource | None) -> tuple[str, bytes]:
        if source is None:
            raise ValidationFailure("Please choose a file to upload")
        if isinstance(source, tuple):
            name, data = source
            if not name:
                raise ValidationFailure("Please choose a file to upload")
            return name, bytes(data)

        path = Path(source).expanduser()
        if not str(source).strip() or not path.is_file():
            raise ValidationFailure("Please choose a file to upload")
        return path.name, path.read_bytes()
