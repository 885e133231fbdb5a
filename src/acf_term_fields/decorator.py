from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, Mapping, MutableMapping, Optional, Tuple

from acf_term_fields.errors import is_wp_error
from acf_term_fields.hooks import FilterRegistry, TermHook
from acf_term_fields.models import query_fields_mode
from acf_term_fields.services import FieldGroupService, FieldValueService, TaxonomyService
from acf_term_fields.utils.logger import get_logger

logger = get_logger(__name__)

FieldMap = Dict[str, Dict[str, str]]

TAXONOMY_SEPARATOR = ", "
ALL_FIELDS = "all"


def normalize_taxonomies(taxonomy: Any) -> Tuple[str, ...]:
    """Turn a taxonomy argument into candidate taxonomy names.

    WordPress passes taxonomy lists either as a real list or as a formatted
    string like ``"'category', 'post_tag'"``.

    Args:
        taxonomy: Name, formatted list string, or iterable of names.

    Returns:
        Tuple[str, ...]: Candidate names.
    """
    if taxonomy is None:
        return ()
    if isinstance(taxonomy, str):
        return tuple(taxonomy.replace("'", "").split(TAXONOMY_SEPARATOR))
    if isinstance(taxonomy, Iterable):
        return tuple(str(t) for t in taxonomy)
    return (str(taxonomy),)


def _field_pair(field: Any) -> Tuple[str, str]:
    if isinstance(field, Mapping):
        return str(field.get("name") or ""), str(field.get("key") or "")
    return str(getattr(field, "name", "") or ""), str(getattr(field, "key", "") or "")


class TermFieldDecorator:
    """Attaches ACF field values to the terms of registered taxonomies.

    The registered taxonomies and the field map cache belong to the instance,
    build one with :func:`acf_term_fields.bootstrap.build_decorator` or by hand
    and pass it where terms are retrieved.

    Args:
        taxonomies: Taxonomy existence and lookup service.
        field_groups: ACF field group service.
        field_values: ACF field value service.
    """

    def __init__(
        self,
        taxonomies: TaxonomyService,
        field_groups: FieldGroupService,
        field_values: FieldValueService,
    ) -> None:
        self._taxonomy_service = taxonomies
        self._field_groups = field_groups
        self._field_values = field_values
        self._taxonomies: Dict[str, Any] = {}
        self._fields: Optional[FieldMap] = None
        self._lock = threading.RLock()

    def register_taxonomy(self, name: str) -> TermFieldDecorator:
        """Add a taxonomy whose terms get their fields attached.

        Unknown taxonomies are ignored.

        Args:
            name: Taxonomy name.

        Returns:
            TermFieldDecorator: Self, for chaining.
        """
        if not self._taxonomy_service.taxonomy_exists(name):
            logger.debug(f"Taxonomia desconhecida ignorada: {name}")
            return self

        descriptor = self._taxonomy_service.get_taxonomy(name)
        with self._lock:
            self._fields = None
            self._taxonomies[name] = descriptor
        logger.debug(f"Taxonomia registada: {name}")
        return self

    def register_taxonomies(self, names: Iterable[str]) -> TermFieldDecorator:
        for name in names:
            self.register_taxonomy(name)
        return self

    def has_registered_taxonomies(self) -> bool:
        return bool(self._taxonomies)

    def registered_taxonomies(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._taxonomies)

    def get_registered_taxonomy(self, name: str) -> Any:
        """Return the descriptor stored for a registered taxonomy, or None."""
        return self._taxonomies.get(name)

    def is_registered(self, taxonomy: Any) -> bool:
        """Check whether any of the given taxonomies is registered.

        Args:
            taxonomy: Name, ``"a, 'b'"`` formatted string, or list of names.

        Returns:
            bool: True if at least one candidate is registered.
        """
        return any(t in self._taxonomies for t in normalize_taxonomies(taxonomy))

    def resolve_field_map(self) -> FieldMap:
        """Return taxonomy -> (field name -> field key), building it if needed."""
        with self._lock:
            if self._fields is None:
                self._fields = self._build_field_map()
            return {taxonomy: dict(fields) for taxonomy, fields in self._fields.items()}

    def _build_field_map(self) -> FieldMap:
        out: FieldMap = {}
        for taxonomy in self._taxonomies:
            groups = self._field_groups.get_field_groups({"taxonomy": taxonomy})
            if not groups:
                continue

            fields: Dict[str, str] = {}
            for group in groups:
                for field in self._field_groups.get_fields(group):
                    name, key = _field_pair(field)
                    if name and key:
                        fields.setdefault(name, key)

            if fields:
                out[taxonomy] = fields

        logger.debug(
            f"Mapa de campos construído: {len(out)} de {len(self._taxonomies)} taxonomias"
        )
        return out

    def resolve_taxonomy_fields(self, taxonomy: str) -> Dict[str, str]:
        """Return field name -> field key for one taxonomy, empty if none."""
        if not self.is_registered(taxonomy):
            return {}
        return self.resolve_field_map().get(taxonomy) or {}

    def decorate_term(self, term: Any) -> Any:
        """Attach field values onto a term.

        Args:
            term: Term object, or an error sentinel.

        Returns:
            Any: The same object, with one attribute per field of its taxonomy.
        """
        if term is None or is_wp_error(term):
            return term

        taxonomy = getattr(term, "taxonomy", None)
        if not taxonomy or not self.is_registered(taxonomy):
            return term

        fields = self.resolve_taxonomy_fields(taxonomy)
        if not fields:
            return term

        for field_name, field_key in fields.items():
            setattr(term, field_name, self._field_values.get_field_value(field_key, term))

        return term

    def decorate_term_list(self, terms: Any) -> Any:
        """Decorate every term of a registered taxonomy in a term list.

        Lists and mappings keyed by term id are updated in place, tuples come
        back as tuples. Order, keys and length are preserved. Anything else is
        returned untouched.

        Args:
            terms: Terms, or an error sentinel.

        Returns:
            Any: The decorated terms.
        """
        if terms is None or is_wp_error(terms) or not self.has_registered_taxonomies():
            return terms

        if isinstance(terms, MutableMapping):
            for key, term in terms.items():
                if self.is_registered(getattr(term, "taxonomy", None)):
                    terms[key] = self.decorate_term(term)
            return terms

        if isinstance(terms, tuple):
            return tuple(self._decorate_items(list(terms)))

        if isinstance(terms, list):
            return self._decorate_items(terms)

        return terms

    def _decorate_items(self, items: list) -> list:
        for i, term in enumerate(items):
            if not self.is_registered(getattr(term, "taxonomy", None)):
                continue
            items[i] = self.decorate_term(term)
        return items

    def decorate_queried_terms(self, terms: Any, taxonomies: Any, args: Any) -> Any:
        """Decorate terms returned by a term query.

        Only full term objects are decorated: any other field selection mode
        (ids, names, counts) returns the input untouched.

        Args:
            terms: Query result, or an error sentinel.
            taxonomies: Queried taxonomies.
            args: Query arguments carrying the ``fields`` mode.

        Returns:
            Any: The query result.
        """
        if terms is None or is_wp_error(terms) or not self.is_registered(taxonomies):
            return terms
        if query_fields_mode(args) != ALL_FIELDS:
            return terms
        return self.decorate_term_list(terms)

    def decorate_object_terms(
        self, terms: Any, object_ids: Any, taxonomies: Any, args: Any
    ) -> Any:
        """Decorate terms retrieved for a set of objects."""
        return self.decorate_queried_terms(terms, taxonomies, args)

    def install(self, registry: FilterRegistry, priority: int = 9) -> FilterRegistry:
        """Hook the decorator into the four term retrieval filters.

        Args:
            registry: Filter registry.
            priority: Filter priority.

        Returns:
            FilterRegistry: The registry.
        """
        registry.add_filter(TermHook.GET_TERMS, self.decorate_queried_terms, priority, 3)
        registry.add_filter(TermHook.GET_THE_TERMS, self.decorate_term_list, priority, 1)
        registry.add_filter(
            TermHook.WP_GET_OBJECT_TERMS, self.decorate_object_terms, priority, 4
        )
        registry.add_filter(TermHook.GET_TERM, self.decorate_term, priority, 1)
        return registry


__all__ = ["TermFieldDecorator", "normalize_taxonomies", "FieldMap"]
