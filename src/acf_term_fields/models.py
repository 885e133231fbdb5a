from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True, slots=True)
class TaxonomyDescriptor:
    """Taxonomy object as described by WordPress.

    Args:
        name: Taxonomy slug, e.g. ``genre``.
        label: Human label.
        rest_base: REST route base for the taxonomy terms.
        object_types: Post types the taxonomy is attached to.
    """

    name: str
    label: str = ""
    rest_base: str = ""
    object_types: tuple[str, ...] = ()

    @property
    def route(self) -> str:
        return self.rest_base or self.name

    @classmethod
    def from_rest(cls, payload: Mapping[str, Any]) -> TaxonomyDescriptor:
        """Build a descriptor from a ``/wp/v2/taxonomies/<name>`` response."""
        return cls(
            name=str(payload.get("slug") or payload.get("name") or ""),
            label=str(payload.get("name") or ""),
            rest_base=str(payload.get("rest_base") or ""),
            object_types=tuple(str(t) for t in payload.get("types") or ()),
        )


@dataclass(frozen=True, slots=True)
class FieldDef:
    """ACF field definition, independent of any per term value."""

    key: str
    name: str
    label: str = ""
    type: str = "text"


@dataclass(frozen=True, slots=True)
class FieldGroup:
    """Named bundle of ACF field definitions.

    Args:
        key: Group key, e.g. ``group_5f1a...``.
        title: Group title.
        fields: Top level field definitions.
        location: ACF location rules, OR of AND groups.
        menu_order: Ordering among groups.
        active: Inactive groups are ignored.
    """

    key: str
    title: str = ""
    fields: tuple[FieldDef, ...] = ()
    location: tuple[tuple[Dict[str, Any], ...], ...] = ()
    menu_order: int = 0
    active: bool = True


@dataclass
class Term:
    """WordPress term record.

    Custom field values are attached as plain attributes after construction;
    ``extra_fields`` lists them.
    """

    term_id: int
    name: str
    slug: str
    taxonomy: str
    description: str = ""
    parent: int = 0
    count: int = 0

    def extra_fields(self) -> Dict[str, Any]:
        """Return attributes attached after construction, in insertion order."""
        base = {f.name for f in fields(self)}
        return {k: v for k, v in vars(self).items() if k not in base}

    @classmethod
    def from_rest(cls, payload: Mapping[str, Any]) -> Term:
        """Build a term from a ``/wp/v2/<rest_base>/<id>`` response."""
        return cls(
            term_id=int(payload.get("id") or 0),
            name=str(payload.get("name") or ""),
            slug=str(payload.get("slug") or ""),
            taxonomy=str(payload.get("taxonomy") or ""),
            description=str(payload.get("description") or ""),
            parent=int(payload.get("parent") or 0),
            count=int(payload.get("count") or 0),
        )


def term_id_of(term: Any) -> Optional[int]:
    """Return the id of a term object, whichever attribute carries it."""
    for attr in ("term_id", "id"):
        value = getattr(term, attr, None)
        if value is not None:
            return int(value)
    return None


def query_fields_mode(args: Any) -> str:
    """Return the field selection mode of term query args.

    Args:
        args: Mapping or object with a ``fields`` entry.

    Returns:
        str: Selection mode, empty when absent.
    """
    if args is None:
        return ""
    if isinstance(args, Mapping):
        raw = args.get("fields", "")
    else:
        raw = getattr(args, "fields", "")
    return str(raw or "")


@dataclass(frozen=True, slots=True)
class QueryArgs:
    """Subset of term query arguments relevant to decoration."""

    fields: str = "all"
    taxonomy: List[str] = field(default_factory=list)


__all__ = [
    "TaxonomyDescriptor",
    "FieldDef",
    "FieldGroup",
    "Term",
    "QueryArgs",
    "term_id_of",
    "query_fields_mode",
]
