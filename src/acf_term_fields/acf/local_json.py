from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from acf_term_fields.errors import FieldGroupLoadError
from acf_term_fields.models import FieldDef, FieldGroup
from acf_term_fields.utils.logger import get_logger

logger = get_logger(__name__)

TAXONOMY_PARAM = "taxonomy"
ANY_VALUE = "all"


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf_8"))
    except OSError as e:
        raise FieldGroupLoadError(f"Falha ao ler {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise FieldGroupLoadError(f"JSON inválido em {path}: {e}") from e


def _parse_field(raw: Mapping[str, Any]) -> Optional[FieldDef]:
    key = str(raw.get("key") or "").strip()
    name = str(raw.get("name") or "").strip()
    if not key or not name:
        return None
    return FieldDef(
        key=key,
        name=name,
        label=str(raw.get("label") or ""),
        type=str(raw.get("type") or "text"),
    )


def parse_field_group(raw: Mapping[str, Any]) -> FieldGroup:
    """Build a field group from an ACF Local JSON object.

    Args:
        raw: Decoded ``group_*.json`` content.

    Returns:
        FieldGroup: Parsed group. Fields without a name (tabs, messages) are dropped.

    Raises:
        FieldGroupLoadError: If the object has no key.
    """
    key = str(raw.get("key") or "").strip()
    if not key:
        raise FieldGroupLoadError("Field group sem key")

    fields = tuple(
        f for f in (_parse_field(x) for x in raw.get("fields") or [] if isinstance(x, dict)) if f
    )
    location = tuple(
        tuple(dict(rule) for rule in and_group if isinstance(rule, dict))
        for and_group in raw.get("location") or []
        if isinstance(and_group, list)
    )
    return FieldGroup(
        key=key,
        title=str(raw.get("title") or ""),
        fields=fields,
        location=location,
        menu_order=int(raw.get("menu_order") or 0),
        active=bool(raw.get("active", True)),
    )


def _rule_matches(rule: Mapping[str, Any], taxonomy: str) -> bool:
    if str(rule.get("param") or "") != TAXONOMY_PARAM:
        return False
    value = str(rule.get("value") or "")
    hit = value == taxonomy or value == ANY_VALUE
    operator = str(rule.get("operator") or "==")
    if operator == "==":
        return hit
    if operator == "!=":
        return not hit
    return False


def group_matches_taxonomy(group: FieldGroup, taxonomy: str) -> bool:
    """Return True when a group's location rules target a taxonomy.

    Location rules are an OR of AND groups.
    """
    return any(
        and_group and all(_rule_matches(rule, taxonomy) for rule in and_group)
        for and_group in group.location
    )


class LocalJsonFieldGroups:
    """Field group service reading an ACF Local JSON directory.

    Args:
        directory: Directory holding ``*.json`` exports, one group per file or
            a list of groups per file.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)
        self._groups: Optional[List[FieldGroup]] = None
        self._lock = threading.Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    def reload(self) -> None:
        with self._lock:
            self._groups = None

    def _load(self) -> List[FieldGroup]:
        with self._lock:
            if self._groups is None:
                self._groups = self._read_directory()
            return self._groups

    def _read_directory(self) -> List[FieldGroup]:
        if not self._directory.is_dir():
            logger.warning(f"Diretório acf-json não encontrado: {self._directory}")
            return []

        groups: List[FieldGroup] = []
        for path in sorted(self._directory.glob("*.json")):
            data = _read_json(path)
            items = data if isinstance(data, list) else [data]
            for item in items:
                if not isinstance(item, dict):
                    raise FieldGroupLoadError(f"Field group inválido em {path}")
                groups.append(parse_field_group(item))

        groups.sort(key=lambda g: (g.menu_order, g.title))
        logger.debug(f"{len(groups)} field groups carregados de {self._directory}")
        return groups

    def all_groups(self) -> List[FieldGroup]:
        return list(self._load())

    def get_field_groups(self, filters: Mapping[str, Any]) -> List[FieldGroup]:
        """Return active groups whose location targets ``filters["taxonomy"]``."""
        taxonomy = str(filters.get("taxonomy") or "")
        if not taxonomy:
            return []
        return [
            g for g in self._load() if g.active and group_matches_taxonomy(g, taxonomy)
        ]

    def get_fields(self, group: FieldGroup) -> Sequence[FieldDef]:
        return group.fields

    def field_name(self, key: str) -> Optional[str]:
        """Return the field name of a field key, or None."""
        return self._names_by_key().get(key)

    def _names_by_key(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for group in self._load():
            for f in group.fields:
                out.setdefault(f.key, f.name)
        return out
