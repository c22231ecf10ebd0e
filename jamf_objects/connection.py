"""Synchronous HTTP connection to a Jamf Pro server, built on httpx."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union
from xml.etree import ElementTree

import httpx

from .config.settings import get_settings
from .exceptions import (
    APIRequestError,
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ConflictError,
    NoSuchItemError,
)
from .utils.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

JAMF_PRO_API_BASE = "api"
CLASSIC_API_BASE = "JSSResource"
TOKEN_PATH = "v1/auth/token"

STATUS_ERRORS = {
    400: BadRequestError,
    401: AuthenticationError,
    403: AuthorizationError,
    409: ConflictError,
}


class Connection:
    """A connection to both the Jamf Pro API (JSON) and the Classic API (XML)."""

    def __init__(
        self,
        base_url: str,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = 30.0,
        verify: bool = True,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.username = username
        self.password = password
        self.token = token
        self.timeout = timeout
        self.verify = verify

        # per-connection memo of collection lists, keyed by class
        self.collection_cache: Dict[type, Any] = {}
        self.c_collection_cache: Dict[type, Any] = {}

    @classmethod
    def from_settings(cls) -> "Connection":
        settings = get_settings()
        return cls(
            settings.jamf_url,
            username=settings.jamf_username,
            password=settings.jamf_password,
            timeout=settings.jamf_timeout,
            verify=settings.jamf_verify_ssl,
        )

    def __repr__(self) -> str:
        return f"Connection({self.base_url!r})"

    def flushcache(self, klass: Optional[type] = None) -> None:
        """Forget cached collection lists, for one class or for all of them."""
        if klass is None:
            self.collection_cache.clear()
            self.c_collection_cache.clear()
            return
        self.collection_cache.pop(klass, None)
        self.c_collection_cache.pop(klass, None)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _acquire_token(self) -> str:
        if not (self.username and self.password):
            raise AuthenticationError("No token, username or password available", 401)
        url = f"{self.base_url}/{JAMF_PRO_API_BASE}/{TOKEN_PATH}"
        response = httpx.post(url, auth=(self.username, self.password), timeout=self.timeout, verify=self.verify)
        if response.status_code != 200:
            raise AuthenticationError(f"Unable to obtain a token from {self.base_url}", response.status_code)
        self.token = response.json()["token"]
        logger.debug("Obtained API token from %s", self.base_url)
        return self.token

    def _headers(self, content_type: str) -> Dict[str, str]:
        token = self.token or self._acquire_token()
        return {
            "Accept": "application/json",
            "Content-Type": content_type,
            "Authorization": f"Bearer {token}",
        }

    def _request(
        self,
        method: str,
        api_base: str,
        path: str,
        *,
        json: Any = None,
        content: Optional[str] = None,
        content_type: str = "application/json",
    ) -> Any:
        path = path.lstrip("/")
        url = f"{self.base_url}/{api_base}/{path}"

        with tracer.start_as_current_span("jamf.request") as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.route", f"/{api_base}/{path}")
            response = httpx.request(
                method,
                url,
                headers=self._headers(content_type),
                json=json,
                content=content,
                timeout=self.timeout,
                verify=self.verify,
            )
            span.set_attribute("http.status_code", response.status_code)

        self._raise_for_status(response, method, path)

        if response.content:
            if "json" in response.headers.get("Content-Type", ""):
                try:
                    return response.json()
                except ValueError:
                    return response.text
            return response.text
        return None

    @staticmethod
    def _raise_for_status(response: httpx.Response, method: str, path: str) -> None:
        status = response.status_code
        if status < 400:
            return
        message = f"{method} {path} failed: {status} {response.text[:200]}"
        logger.debug(message)
        if status == 404:
            raise NoSuchItemError(message)
        raise STATUS_ERRORS.get(status, APIRequestError)(message, status)

    # ------------------------------------------------------------------
    # Jamf Pro API
    # ------------------------------------------------------------------
    def get(self, path: str) -> Any:
        return self._request("GET", JAMF_PRO_API_BASE, path)

    def post(self, path: str, body: Any = None) -> Any:
        return self._request("POST", JAMF_PRO_API_BASE, path, json=body)

    def put(self, path: str, body: Any = None) -> Any:
        return self._request("PUT", JAMF_PRO_API_BASE, path, json=body)

    def patch(self, path: str, body: Any = None) -> Any:
        return self._request("PATCH", JAMF_PRO_API_BASE, path, json=body)

    def delete(self, path: str) -> Any:
        return self._request("DELETE", JAMF_PRO_API_BASE, path)

    # ------------------------------------------------------------------
    # Classic API
    # ------------------------------------------------------------------
    @staticmethod
    def _xml_text(xml: Union[str, ElementTree.Element, None]) -> Optional[str]:
        if xml is None:
            return None
        if isinstance(xml, ElementTree.Element):
            return ElementTree.tostring(xml, encoding="unicode")
        return xml

    def c_get(self, path: str) -> Any:
        return self._request("GET", CLASSIC_API_BASE, path)

    def c_post(self, path: str, xml: Union[str, ElementTree.Element, None] = None) -> Any:
        return self._request("POST", CLASSIC_API_BASE, path, content=self._xml_text(xml), content_type="text/xml")

    def c_put(self, path: str, xml: Union[str, ElementTree.Element, None] = None) -> Any:
        return self._request("PUT", CLASSIC_API_BASE, path, content=self._xml_text(xml), content_type="text/xml")

    def c_delete(self, path: str) -> Any:
        return self._request("DELETE", CLASSIC_API_BASE, path)


_default_connection: Optional[Any] = None


def get_connection() -> Any:
    """Return the default connection, creating it from Settings on first use."""
    global _default_connection
    if _default_connection is None:
        _default_connection = Connection.from_settings()
    return _default_connection


def set_connection(cnx: Any) -> None:
    global _default_connection
    _default_connection = cnx


def resolve(cnx: Any = None) -> Any:
    return cnx if cnx is not None else get_connection()
