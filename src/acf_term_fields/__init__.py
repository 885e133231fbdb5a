from acf_term_fields.decorator import TermFieldDecorator, normalize_taxonomies
from acf_term_fields.errors import WPError, is_wp_error
from acf_term_fields.hooks import FilterRegistry, TermHook
from acf_term_fields.models import FieldDef, FieldGroup, TaxonomyDescriptor, Term

__version__ = "1.1.0"

__all__ = [
    "TermFieldDecorator",
    "normalize_taxonomies",
    "WPError",
    "is_wp_error",
    "FilterRegistry",
    "TermHook",
    "FieldDef",
    "FieldGroup",
    "TaxonomyDescriptor",
    "Term",
]
