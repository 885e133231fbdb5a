from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple

from acf_term_fields.models import FieldDef, FieldGroup, TaxonomyDescriptor, term_id_of


class TaxonomyService(Protocol):
    """Taxonomy existence and lookup."""

    def taxonomy_exists(self, name: str) -> bool: ...

    def get_taxonomy(self, name: str) -> Any: ...


class FieldGroupService(Protocol):
    """ACF field group definitions."""

    def get_field_groups(self, filters: Mapping[str, Any]) -> Sequence[FieldGroup]: ...

    def get_fields(self, group: FieldGroup) -> Sequence[FieldDef]: ...


class FieldValueService(Protocol):
    """Per term ACF field values."""

    def get_field_value(self, field_key: str, term: Any) -> Any: ...


@dataclass(slots=True)
class InMemoryTaxonomyService:
    """Taxonomy service over a fixed set of descriptors.

    Args:
        taxonomies: Mapping of taxonomy name to descriptor.
    """

    taxonomies: Dict[str, TaxonomyDescriptor] = field(default_factory=dict)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> InMemoryTaxonomyService:
        clean = [str(n).strip() for n in names if str(n).strip()]
        return cls({n: TaxonomyDescriptor(name=n, label=n, rest_base=n) for n in clean})

    def add(self, descriptor: TaxonomyDescriptor) -> None:
        self.taxonomies[descriptor.name] = descriptor

    def taxonomy_exists(self, name: str) -> bool:
        return name in self.taxonomies

    def get_taxonomy(self, name: str) -> Optional[TaxonomyDescriptor]:
        return self.taxonomies.get(name)


@dataclass
class InMemoryFieldGroups:
    """Field group service over groups keyed by taxonomy.

    Args:
        groups: Mapping of taxonomy name to its field groups.
    """

    groups: Dict[str, List[FieldGroup]] = field(default_factory=dict)

    def add(self, taxonomy: str, group: FieldGroup) -> None:
        self.groups.setdefault(taxonomy, []).append(group)

    def get_field_groups(self, filters: Mapping[str, Any]) -> List[FieldGroup]:
        taxonomy = str(filters.get("taxonomy") or "")
        return list(self.groups.get(taxonomy, []))

    def get_fields(self, group: FieldGroup) -> List[FieldDef]:
        return list(group.fields)


@dataclass(slots=True)
class InMemoryFieldValues:
    """Field values keyed by (field key, term id).

    Every lookup is recorded in ``calls``.
    """

    values: Dict[Tuple[str, int], Any] = field(default_factory=dict)
    calls: List[Tuple[str, Optional[int]]] = field(default_factory=list)

    def set(self, field_key: str, term_id: int, value: Any) -> None:
        self.values[(field_key, int(term_id))] = value

    def get_field_value(self, field_key: str, term: Any) -> Any:
        tid = term_id_of(term)
        self.calls.append((field_key, tid))
        if tid is None:
            return None
        return self.values.get((field_key, tid))


@dataclass(frozen=True, slots=True)
class CallableFieldValues:
    """Adapts a plain ``(field_key, term) -> value`` function."""

    fn: Callable[[str, Any], Any]

    def get_field_value(self, field_key: str, term: Any) -> Any:
        return self.fn(field_key, term)


__all__ = [
    "TaxonomyService",
    "FieldGroupService",
    "FieldValueService",
    "InMemoryTaxonomyService",
    "InMemoryFieldGroups",
    "InMemoryFieldValues",
    "CallableFieldValues",
]
