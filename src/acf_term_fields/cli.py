from __future__ import annotations

import json
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table

from acf_term_fields.bootstrap import build_decorator
from acf_term_fields.errors import SettingsError, TermFieldsError
from acf_term_fields.hooks import TermHook
from acf_term_fields.models import TaxonomyDescriptor, Term
from acf_term_fields.settings import get_settings
from acf_term_fields.utils.logger import get_logger

app = typer.Typer(help="ACF fields on WordPress taxonomy terms.")
console = Console()
logger = get_logger(__name__)


def _render(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return "" if value is None else str(value)


@app.command("fields")
def fields(
    taxonomy: Optional[str] = typer.Option(None, help="só esta taxonomia"),
) -> None:
    """Show the field map of the configured taxonomies."""
    try:
        runtime = build_decorator(get_settings())
        field_map = runtime.decorator.resolve_field_map()
    except TermFieldsError as e:
        logger.error(f"Falha ao resolver campos: {e}")
        raise typer.Exit(code=2) from e

    table = Table(title="ACF term fields")
    table.add_column("taxonomy")
    table.add_column("field")
    table.add_column("key")

    for tax in runtime.decorator.registered_taxonomies():
        if taxonomy and tax != taxonomy:
            continue
        for name, key in field_map.get(tax, {}).items():
            table.add_row(tax, name, key)

    console.print(table)


@app.command("term")
def term(
    taxonomy: str = typer.Argument(..., help="taxonomia do termo"),
    term_id: int = typer.Argument(..., help="id do termo"),
) -> None:
    """Fetch a term over REST and show its ACF fields."""
    try:
        runtime = build_decorator(get_settings())
        if runtime.client is None:
            raise SettingsError("WordPress não configurado, define wordpress.base_url")

        descriptor = runtime.decorator.get_registered_taxonomy(taxonomy)
        route = descriptor.route if isinstance(descriptor, TaxonomyDescriptor) else taxonomy
        item = Term.from_rest(runtime.client.get_term(route, term_id))
        if not item.taxonomy:
            item.taxonomy = taxonomy
        decorated = runtime.filters.apply_filters(TermHook.GET_TERM, item)
    except TermFieldsError as e:
        logger.error(f"Falha ao obter termo {taxonomy}/{term_id}: {e}")
        raise typer.Exit(code=2) from e

    table = Table(title=f"{decorated.taxonomy}: {decorated.name} ({decorated.term_id})")
    table.add_column("field")
    table.add_column("value")
    for name, value in decorated.extra_fields().items():
        table.add_row(name, _render(value))
    console.print(table)


if __name__ == "__main__":
    app()
