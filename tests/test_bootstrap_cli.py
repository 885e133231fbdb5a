from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from acf_term_fields import cli
from acf_term_fields.bootstrap import build_decorator
from acf_term_fields.hooks import TermHook
from acf_term_fields.models import Term
from acf_term_fields.settings import AppConfig
from acf_term_fields.utils.project_paths import ProjectPaths
from acf_term_fields.wordpress.client import WPClient, WPConfig

runner = CliRunner()


def _acf_dir(tmp_path: Path) -> Path:
    d = tmp_path / "acf-json"
    d.mkdir()
    group = {
        "key": "group_genre",
        "title": "Genre",
        "fields": [{"key": "field_colour", "name": "colour", "type": "text"}],
        "location": [[{"param": "taxonomy", "operator": "==", "value": "genre"}]],
    }
    (d / "group_genre.json").write_text(json.dumps(group), encoding="utf-8")
    return d


def _config(tmp_path: Path, **extra) -> AppConfig:
    data = {
        "taxonomies": ["genre", "missing"],
        "known_taxonomies": ["genre", "category"],
        "acf": {"json_dir": str(_acf_dir(tmp_path))},
    }
    data.update(extra)
    return AppConfig.model_validate(data)


def test_offline_runtime(tmp_path: Path) -> None:
    """Without WordPress, taxonomies come from config and values are None."""
    runtime = build_decorator(_config(tmp_path), paths=ProjectPaths(root=tmp_path))

    assert runtime.client is None
    assert runtime.decorator.registered_taxonomies() == ("genre",)
    assert runtime.decorator.resolve_field_map() == {"genre": {"colour": "field_colour"}}

    term = runtime.filters.apply_filters(
        TermHook.GET_TERM, Term(term_id=1, name="Action", slug="action", taxonomy="genre")
    )
    assert term.extra_fields() == {"colour": None}


class _Response:
    def __init__(self, payload):
        self.status_code = 200
        self._payload = payload
        self.text = ""

    def json(self):
        return self._payload


class _Session:
    def __init__(self, routes):
        self.routes = routes
        self.headers = {}

    def mount(self, prefix, adapter):
        pass

    def request(self, method, url, params=None, timeout=None):
        path = "/" + url.split("://", 1)[-1].split("/", 1)[-1]
        if path in self.routes:
            return _Response(self.routes[path])
        r = _Response({"code": "rest_no_route"})
        r.status_code = 404
        return r


def _rest_client() -> WPClient:
    routes = {
        "/wp-json/wp/v2/taxonomies/genre": {"slug": "genre", "name": "Genres", "rest_base": "genres"},
        "/wp-json/wp/v2/genres/7": {
            "id": 7,
            "name": "Action",
            "slug": "action",
            "taxonomy": "genre",
            "acf": {"colour": "red"},
        },
    }
    return WPClient(WPConfig(base_url="https://example.test"), session=_Session(routes))


def test_rest_runtime(tmp_path: Path) -> None:
    """With a REST client, values come from the term acf block."""
    runtime = build_decorator(
        _config(tmp_path), paths=ProjectPaths(root=tmp_path), client=_rest_client()
    )
    assert runtime.decorator.registered_taxonomies() == ("genre",)

    term = Term(term_id=7, name="Action", slug="action", taxonomy="genre")
    terms = runtime.filters.apply_filters(
        TermHook.GET_TERMS, [term], ["genre"], {"fields": "all"}
    )
    assert terms[0].colour == "red"


def test_cli_fields(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The fields command lists the field map."""
    cfg = _config(tmp_path)
    monkeypatch.setattr(cli, "get_settings", lambda: cfg)

    result = runner.invoke(cli.app, ["fields"])
    assert result.exit_code == 0
    assert "colour" in result.output
    assert "field_colour" in result.output


def test_cli_term_requires_wordpress(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The term command fails with exit code 2 without WordPress."""
    cfg = _config(tmp_path)
    monkeypatch.setattr(cli, "get_settings", lambda: cfg)

    result = runner.invoke(cli.app, ["term", "genre", "7"])
    assert result.exit_code == 2


def test_cli_term(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The term command shows the decorated term fields."""
    cfg = _config(tmp_path, wordpress={"base_url": "https://example.test"})
    monkeypatch.setattr(cli, "get_settings", lambda: cfg)
    monkeypatch.setattr("acf_term_fields.bootstrap.make_client", lambda config: _rest_client())

    result = runner.invoke(cli.app, ["term", "genre", "7"])
    assert result.exit_code == 0
    assert "colour" in result.output
    assert "red" in result.output
