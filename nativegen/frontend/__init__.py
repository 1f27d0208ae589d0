from nativegen.frontend.catalog import TypeCatalog
from nativegen.frontend.loader import (build_native_class, load_template,
                                       parse_modifier, validate_document)

__all__ = [
    "TypeCatalog",
    "build_native_class",
    "load_template",
    "parse_modifier",
    "validate_document",
]
