from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from acf_term_fields.models import TaxonomyDescriptor, term_id_of
from acf_term_fields.services import TaxonomyService
from acf_term_fields.utils.logger import get_logger
from acf_term_fields.wordpress.client import WordPressNotFoundError, WPClient

logger = get_logger(__name__)


class RestTaxonomyService:
    """Taxonomy service backed by ``/wp-json/wp/v2/taxonomies``.

    A 404 means the taxonomy does not exist. Descriptors are cached per
    instance, missing taxonomies are not.
    """

    def __init__(self, client: WPClient) -> None:
        self._client = client
        self._cache: Dict[str, TaxonomyDescriptor] = {}

    def get_taxonomy(self, name: str) -> Optional[TaxonomyDescriptor]:
        if name in self._cache:
            return self._cache[name]
        try:
            payload = self._client.get_taxonomy(name)
        except WordPressNotFoundError:
            return None
        descriptor = TaxonomyDescriptor.from_rest(payload)
        self._cache[name] = descriptor
        return descriptor

    def taxonomy_exists(self, name: str) -> bool:
        return self.get_taxonomy(name) is not None


class RestFieldValueService:
    """Field value service reading the ``acf`` block of a term over REST.

    Needs ACF's "Show in REST" on the field groups. The block is keyed by
    field name, so field keys are translated with ``field_name_for``.

    Args:
        client: WordPress REST client.
        taxonomies: Resolves the REST base of a term's taxonomy.
        field_name_for: Maps a field key to its field name.
    """

    def __init__(
        self,
        client: WPClient,
        taxonomies: TaxonomyService,
        field_name_for: Callable[[str], Optional[str]],
    ) -> None:
        self._client = client
        self._taxonomies = taxonomies
        self._field_name_for = field_name_for

    def _rest_base(self, taxonomy: str) -> str:
        descriptor = self._taxonomies.get_taxonomy(taxonomy)
        if isinstance(descriptor, TaxonomyDescriptor):
            return descriptor.route
        return taxonomy

    def get_field_value(self, field_key: str, term: Any) -> Any:
        name = self._field_name_for(field_key)
        tid = term_id_of(term)
        if not name or tid is None:
            return None

        rest_base = self._rest_base(str(getattr(term, "taxonomy", "")))
        payload = self._client.get_term(rest_base, tid, fields="acf")
        acf = payload.get("acf")
        if not isinstance(acf, dict):
            logger.debug(f"Termo {tid} sem bloco acf em {rest_base}")
            return None
        return acf.get(name)
