from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pytest


def pytest_configure() -> None:
    """Ensure src layout is importable during tests."""
    root = Path(__file__).resolve().parents[1]
    src = (root / "src").resolve()
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


@pytest.fixture
def make_decorator() -> Callable[..., Tuple[object, object, object, object]]:
    """Build a decorator over in-memory services.

    Returns a factory taking ``{taxonomy: [(name, key), ...]}`` group specs
    and the names of existing taxonomies.
    """
    from acf_term_fields.decorator import TermFieldDecorator
    from acf_term_fields.models import FieldDef, FieldGroup
    from acf_term_fields.services import (
        InMemoryFieldGroups,
        InMemoryFieldValues,
        InMemoryTaxonomyService,
    )

    def _make(
        groups: Dict[str, List[List[Tuple[str, str]]]] | None = None,
        existing: Tuple[str, ...] = ("category", "post_tag", "genre"),
    ):
        taxonomies = InMemoryTaxonomyService.from_names(existing)
        field_groups = InMemoryFieldGroups()
        for taxonomy, specs in (groups or {}).items():
            for i, spec in enumerate(specs):
                field_groups.add(
                    taxonomy,
                    FieldGroup(
                        key=f"group_{taxonomy}_{i}",
                        title=f"{taxonomy} {i}",
                        fields=tuple(FieldDef(key=k, name=n) for n, k in spec),
                    ),
                )
        values = InMemoryFieldValues()
        decorator = TermFieldDecorator(taxonomies, field_groups, values)
        return decorator, taxonomies, field_groups, values

    return _make
