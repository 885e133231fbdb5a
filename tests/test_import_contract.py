from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True, slots=True)
class ImportContract:
    """A list of import targets that must remain stable.

    Args:
        targets: Import strings to validate.
    """

    targets: tuple[str, ...]


def _contract() -> ImportContract:
    return ImportContract(
        targets=(
            "acf_term_fields",
            "acf_term_fields.decorator",
            "acf_term_fields.hooks",
            "acf_term_fields.services",
            "acf_term_fields.settings",
            "acf_term_fields.bootstrap",
            "acf_term_fields.cli",
            "acf_term_fields.acf.local_json",
            "acf_term_fields.wordpress.client",
            "acf_term_fields.wordpress.services",
        )
    )


def _import_all(targets: Iterable[str]) -> None:
    for t in targets:
        importlib.import_module(t)


def test_import_contract() -> None:
    """Validate that stable import targets remain importable."""
    _import_all(_contract().targets)
