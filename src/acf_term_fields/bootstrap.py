from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from acf_term_fields.acf.local_json import LocalJsonFieldGroups
from acf_term_fields.decorator import TermFieldDecorator
from acf_term_fields.hooks import FilterRegistry
from acf_term_fields.services import (
    CallableFieldValues,
    FieldValueService,
    InMemoryTaxonomyService,
    TaxonomyService,
)
from acf_term_fields.settings import AppConfig
from acf_term_fields.utils.logger import get_logger
from acf_term_fields.utils.project_paths import ProjectPaths
from acf_term_fields.wordpress.client import WPClient, WPConfig
from acf_term_fields.wordpress.services import RestFieldValueService, RestTaxonomyService

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Runtime:
    """Everything built from one config.

    Attributes:
        config: Config used.
        decorator: Decorator with the configured taxonomies registered.
        filters: Filter registry with the decorator installed.
        field_groups: Field group service.
        client: REST client, None when WordPress is not configured.
    """

    config: AppConfig
    decorator: TermFieldDecorator
    filters: FilterRegistry
    field_groups: LocalJsonFieldGroups
    client: Optional[WPClient] = None


def make_client(config: AppConfig) -> Optional[WPClient]:
    wp = config.wordpress
    if not wp.enabled:
        return None
    return WPClient(
        WPConfig(
            base_url=wp.base_url,
            username=wp.username,
            app_password=wp.app_password,
            timeout=int(wp.timeout),
        )
    )


def _offline_value(field_key: str, term: object) -> None:
    return None


def build_decorator(
    config: AppConfig,
    *,
    paths: Optional[ProjectPaths] = None,
    client: Optional[WPClient] = None,
) -> Runtime:
    """Build an owned decorator from config and register its taxonomies.

    REST services are used when WordPress is configured; otherwise taxonomies
    come from ``known_taxonomies`` and field values resolve to None.

    Args:
        config: App config.
        paths: Project paths for relative directories.
        client: Optional preconfigured REST client.

    Returns:
        Runtime: Decorator, filters and services.
    """
    resolved_paths = paths or ProjectPaths.discover()
    field_groups = LocalJsonFieldGroups(config.acf_json_path(resolved_paths))

    rest = client or make_client(config)
    taxonomies: TaxonomyService
    values: FieldValueService
    if rest is not None:
        taxonomies = RestTaxonomyService(rest)
        values = RestFieldValueService(rest, taxonomies, field_groups.field_name)
    else:
        taxonomies = InMemoryTaxonomyService.from_names(config.known_taxonomies)
        values = CallableFieldValues(_offline_value)

    decorator = TermFieldDecorator(taxonomies, field_groups, values)
    decorator.register_taxonomies(config.taxonomies)

    skipped = [t for t in config.taxonomies if not decorator.is_registered(t)]
    if skipped:
        logger.warning(f"Taxonomias inexistentes ignoradas: {', '.join(skipped)}")

    filters = build_filters(decorator, priority=config.hooks.priority)
    return Runtime(
        config=config,
        decorator=decorator,
        filters=filters,
        field_groups=field_groups,
        client=rest,
    )


def build_filters(decorator: TermFieldDecorator, priority: int = 9) -> FilterRegistry:
    """Return a filter registry with the decorator installed."""
    return decorator.install(FilterRegistry(), priority=priority)
