from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
import requests

from acf_term_fields.models import TaxonomyDescriptor, Term
from acf_term_fields.wordpress.client import (
    WordPressNotFoundError,
    WordPressRequestError,
    WordPressResponseError,
    WPClient,
    WPConfig,
)
from acf_term_fields.wordpress.services import RestFieldValueService, RestTaxonomyService


class _Response:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class _Session:
    """Minimal stand-in for requests.Session routing by URL path."""

    def __init__(self, routes: Dict[str, _Response]) -> None:
        self.routes = routes
        self.headers: Dict[str, str] = {}
        self.requests: List[Tuple[str, Optional[Dict[str, Any]]]] = []

    def mount(self, prefix: str, adapter: Any) -> None:
        pass

    def request(self, method: str, url: str, params=None, timeout=None) -> _Response:
        path = url.split("://", 1)[-1].split("/", 1)[-1]
        self.requests.append(("/" + path, params))
        if "/" + path not in self.routes:
            return _Response(404, {"code": "rest_no_route"})
        return self.routes["/" + path]


def _client(routes: Dict[str, _Response], **cfg: Any) -> Tuple[WPClient, _Session]:
    session = _Session(routes)
    config = WPConfig(base_url="https://example.test/", **cfg)
    return WPClient(config, session=session), session


_GENRE = {
    "name": "Genres",
    "slug": "genre",
    "rest_base": "genres",
    "types": ["book"],
}


def test_auth_header_only_with_credentials() -> None:
    client, session = _client({})
    assert "Authorization" not in session.headers
    client, session = _client({}, username="bot", app_password="abcd efgh")
    assert session.headers["Authorization"].startswith("Basic ")


def test_taxonomy_service_exists_and_caches() -> None:
    client, session = _client({"/wp-json/wp/v2/taxonomies/genre": _Response(200, _GENRE)})
    service = RestTaxonomyService(client)

    assert service.taxonomy_exists("genre")
    descriptor = service.get_taxonomy("genre")
    assert descriptor == TaxonomyDescriptor(
        name="genre", label="Genres", rest_base="genres", object_types=("book",)
    )
    assert len(session.requests) == 1

    assert not service.taxonomy_exists("colour")
    assert service.get_taxonomy("colour") is None


def test_error_statuses() -> None:
    client, _ = _client(
        {
            "/wp-json/wp/v2/taxonomies/a": _Response(500, text="boom"),
            "/wp-json/wp/v2/taxonomies/b": _Response(200, None, text="<html>"),
        }
    )
    with pytest.raises(WordPressResponseError) as exc:
        client.get_taxonomy("a")
    assert exc.value.status_code == 500
    with pytest.raises(WordPressResponseError):
        client.get_taxonomy("b")
    with pytest.raises(WordPressNotFoundError):
        client.get_taxonomy("c")


def test_network_error_is_wrapped() -> None:
    client, session = _client({})

    def fail(*args, **kwargs):
        raise requests.ConnectionError("refused")

    session.request = fail
    with pytest.raises(WordPressRequestError):
        client.get("/wp-json/wp/v2/taxonomies")


def test_field_values_read_acf_block() -> None:
    client, session = _client(
        {
            "/wp-json/wp/v2/taxonomies/genre": _Response(200, _GENRE),
            "/wp-json/wp/v2/genres/7": _Response(200, {"acf": {"colour": "#ff0000"}}),
            "/wp-json/wp/v2/genres/8": _Response(200, {"acf": []}),
        }
    )
    taxonomies = RestTaxonomyService(client)
    names = {"field_1": "colour"}
    service = RestFieldValueService(client, taxonomies, names.get)

    term = Term(term_id=7, name="Action", slug="action", taxonomy="genre")
    assert service.get_field_value("field_1", term) == "#ff0000"
    assert ("/wp-json/wp/v2/genres/7", {"_fields": "acf"}) in session.requests

    other = Term(term_id=8, name="Drama", slug="drama", taxonomy="genre")
    assert service.get_field_value("field_1", other) is None
    assert service.get_field_value("field_unknown", term) is None


def test_field_values_are_not_cached() -> None:
    client, session = _client(
        {
            "/wp-json/wp/v2/taxonomies/genre": _Response(200, _GENRE),
            "/wp-json/wp/v2/genres/7": _Response(200, {"acf": {"colour": "red"}}),
        }
    )
    service = RestFieldValueService(client, RestTaxonomyService(client), {"k": "colour"}.get)
    term = Term(term_id=7, name="Action", slug="action", taxonomy="genre")
    service.get_field_value("k", term)
    service.get_field_value("k", term)
    assert [p for p, _ in session.requests].count("/wp-json/wp/v2/genres/7") == 2


def test_term_from_rest() -> None:
    term = Term.from_rest(
        {"id": 7, "name": "Action", "slug": "action", "taxonomy": "genre", "count": 3}
    )
    assert term == Term(term_id=7, name="Action", slug="action", taxonomy="genre", count=3)
