from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from acf_term_fields.errors import TermFieldsError
from acf_term_fields.utils.logger import get_logger

logger = get_logger(__name__)


class WordPressError(TermFieldsError):
    """Raised when WordPress integration fails."""


class WordPressRequestError(WordPressError):
    """Raised when the HTTP request fails before getting a response."""


class WordPressResponseError(WordPressError):
    """Raised when WordPress returns an invalid or error response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class WordPressNotFoundError(WordPressResponseError):
    """Raised when WordPress answers 404."""


@dataclass(frozen=True, slots=True)
class WPConfig:
    """Runtime configuration for WordPress REST calls.

    Args:
        base_url: Base URL of the WordPress site.
        username: WordPress username, empty for anonymous reads.
        app_password: WordPress application password.
        timeout: Request timeout in seconds.
    """

    base_url: str
    username: str = ""
    app_password: str = ""
    timeout: int = 30


def _basic_auth_header(username: str, app_password: str) -> str:
    user = str(username or "").strip()
    pwd = str(app_password or "").strip()
    creds = f"{user}:{pwd}"
    token = base64.b64encode(creds.encode("utf-8")).decode("utf-8")
    return f"Basic {token}"


def _make_retry() -> Retry:
    return Retry(
        total=3,
        connect=3,
        read=3,
        status=3,
        backoff_factor=0.6,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
        respect_retry_after_header=True,
    )


class WPClient:
    """Read only WordPress REST client.

    Responsible for HTTP transport and response validation.
    """

    def __init__(self, cfg: WPConfig, session: Optional[requests.Session] = None) -> None:
        self._cfg = cfg
        self._session = session or requests.Session()

        adapter = HTTPAdapter(max_retries=_make_retry())
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

        self._session.headers.update({"User-Agent": "AcfTermFields/1.1"})
        if cfg.username and cfg.app_password:
            self._session.headers["Authorization"] = _basic_auth_header(
                cfg.username, cfg.app_password
            )

    @property
    def cfg(self) -> WPConfig:
        """Return the configuration used by this client."""
        return self._cfg

    def _url(self, path: str) -> str:
        base = str(self._cfg.base_url).rstrip("/")
        safe_path = str(path or "").lstrip("/")
        return f"{base}/{safe_path}"

    def _request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        url = self._url(path)
        try:
            response = self._session.request(
                method=str(method).upper(),
                url=url,
                params=params,
                timeout=float(timeout or self._cfg.timeout),
            )
        except requests.RequestException as e:
            raise WordPressRequestError(f"Falha de rede ao chamar {url}: {e}") from e

        status = int(response.status_code)
        if status == 404:
            raise WordPressNotFoundError(f"Não encontrado: {url}", status_code=status)

        if not 200 <= status < 300:
            snippet = str(response.text or "").strip()[:800]
            raise WordPressResponseError(
                f"WordPress respondeu {status} em {url}, detalhe: {snippet}",
                status_code=status,
            )

        try:
            return response.json()
        except ValueError as e:
            snippet = str(response.text or "").strip()[:800]
            raise WordPressResponseError(
                f"Resposta WordPress sem JSON válido em {url}, detalhe: {snippet}",
                status_code=status,
            ) from e

    def get(self, path: str, **kw: Any) -> Any:
        """Perform a GET request.

        Args:
            path: Relative path.
            **kw: ``params`` and ``timeout``.

        Returns:
            Any: Parsed JSON.
        """
        params = kw.pop("params", None)
        timeout = kw.pop("timeout", None)
        return self._request_json("GET", path, params=params, timeout=timeout)

    def get_taxonomy(self, name: str) -> Dict[str, Any]:
        """Fetch a taxonomy object."""
        data = self.get(f"/wp-json/wp/v2/taxonomies/{name}")
        if not isinstance(data, dict):
            raise WordPressResponseError("Resposta inesperada ao obter taxonomia")
        return data

    def get_term(self, rest_base: str, term_id: int, fields: Optional[str] = None) -> Dict[str, Any]:
        """Fetch a single term.

        Args:
            rest_base: Taxonomy REST base, e.g. ``categories``.
            term_id: Term id.
            fields: Optional ``_fields`` filter.

        Returns:
            Dict[str, Any]: Term payload.
        """
        params = {"_fields": fields} if fields else None
        data = self.get(f"/wp-json/wp/v2/{rest_base}/{int(term_id)}", params=params)
        if not isinstance(data, dict):
            raise WordPressResponseError("Resposta inesperada ao obter termo")
        return data
