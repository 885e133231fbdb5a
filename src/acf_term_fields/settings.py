from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from acf_term_fields.errors import SettingsError
from acf_term_fields.utils.logger import get_logger
from acf_term_fields.utils.project_paths import ProjectPaths

logger = get_logger(__name__)


def _split_names(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [p.strip() for p in raw.split(",") if p.strip()]
    return [str(p).strip() for p in raw if str(p).strip()]


class AcfConfig(BaseModel):
    """ACF field group source."""

    json_dir: str = "configs/acf-json"

    model_config = {"extra": "forbid"}


class WordPressConfig(BaseModel):
    """Config WordPress, empty base_url means offline services."""

    base_url: str = ""
    username: str = ""
    app_password: str = ""
    timeout: int = Field(default=30, ge=1)

    model_config = {"extra": "forbid"}

    @property
    def enabled(self) -> bool:
        return bool(self.base_url.strip())


class HooksConfig(BaseModel):
    """Filter registration."""

    priority: int = 9

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Config principal.

    Attributes:
        taxonomies: Taxonomies whose terms get their fields attached.
        known_taxonomies: Taxonomies that exist when WordPress is not reachable.
        acf: Field group source.
        wordpress: REST access.
        hooks: Filter registration.
        app_env: Active profile.
    """

    taxonomies: List[str] = Field(default_factory=list)
    known_taxonomies: List[str] = Field(default_factory=list)
    acf: AcfConfig = AcfConfig()
    wordpress: WordPressConfig = WordPressConfig()
    hooks: HooksConfig = HooksConfig()
    app_env: str = "production"

    model_config = {"extra": "forbid"}

    @field_validator("taxonomies", "known_taxonomies", mode="before")
    @classmethod
    def _names(cls, v: Any) -> List[str]:
        return _split_names(v)

    def acf_json_path(self, paths: ProjectPaths) -> Path:
        """Return the acf-json directory resolved against the project root."""
        return paths.resolve_relative(self.acf.json_dir)


def load_app_config(paths: Optional[ProjectPaths] = None) -> AppConfig:
    """Load, merge and validate the app config.

    Reads ``configs/default.yaml``, overlays ``configs/config.<APP_ENV>.yaml``
    when present, then applies environment overrides.

    Args:
        paths: Resolved project paths.

    Returns:
        AppConfig: Validated config.

    Raises:
        SettingsError: On missing or invalid config.
    """
    load_dotenv(override=False)

    resolved_paths = paths or ProjectPaths.discover()
    env_name = str(os.getenv("APP_ENV", "production") or "production").strip()

    default_path = (resolved_paths.configs_dir / "default.yaml").resolve()
    profile_path = (resolved_paths.configs_dir / f"config.{env_name}.yaml").resolve()

    base = _read_yaml_mapping(default_path, required=True)
    overlay = _read_yaml_mapping(profile_path, required=False)

    merged = _deep_merge(base, overlay)
    merged["app_env"] = env_name

    _override_from_env(merged)

    try:
        model = AppConfig.model_validate(merged)
    except ValidationError as e:
        raise SettingsError(f"Config validation failed: {e}") from e

    logger.info(
        f"Loaded app config, env={env_name}, default={default_path}, profile_exists={profile_path.exists()}"
    )
    return model


@lru_cache(maxsize=1)
def get_settings() -> AppConfig:
    """Return the app config, loaded once per process."""
    return load_app_config()


def _read_yaml_mapping(path: Path, required: bool) -> Dict[str, Any]:
    if not path.exists():
        if required:
            raise SettingsError(f"Missing config file: {path}")
        return {}

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf8"))
    except (OSError, yaml.YAMLError) as e:
        raise SettingsError(f"Invalid YAML at {path}: {e}") from e

    if raw is None:
        return {}

    if not isinstance(raw, dict):
        raise SettingsError(f"Top level YAML must be a mapping at {path}")

    return raw


def _deep_merge(a: Mapping[str, Any], b: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {k: v for k, v in a.items()}
    for k, v in b.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _section(merged: Dict[str, Any], name: str) -> Dict[str, Any]:
    raw = merged.get(name)
    section = dict(raw) if isinstance(raw, dict) else {}
    merged[name] = section
    return section


def _override_from_env(merged: Dict[str, Any]) -> None:
    wp = _section(merged, "wordpress")
    for env_key, cfg_key in (
        ("WP_BASE_URL", "base_url"),
        ("WP_USERNAME", "username"),
        ("WP_APP_PASSWORD", "app_password"),
    ):
        value = str(os.getenv(env_key, "") or "").strip()
        if value:
            wp[cfg_key] = value

    json_dir = str(os.getenv("ACF_JSON_DIR", "") or "").strip()
    if json_dir:
        _section(merged, "acf")["json_dir"] = json_dir

    taxonomies = str(os.getenv("ACF_TERM_FIELDS_TAXONOMIES", "") or "").strip()
    if taxonomies:
        merged["taxonomies"] = _split_names(taxonomies)
