from typing import Any, Mapping, Optional

from nativegen import utils
from nativegen.errors import TemplateError
from nativegen.native_types import (CharMapping, NativeType, PointerMapping,
                                    PrimitiveMapping, callback, charseq,
                                    pointer, primitive, struct)


def _enum_member(enum_type, name: str, type_name: str):
    try:
        return enum_type[name]
    except KeyError:
        raise TemplateError(f"Unknown {enum_type.__name__} '{name}' for type '{type_name}'") from None


def build_type(name: str, definition: Mapping[str, Any]) -> NativeType:
    kind = definition.get("kind")
    match kind:
        case "primitive":
            return primitive(name, _enum_member(PrimitiveMapping, definition["mapping"], name))
        case "pointer":
            return pointer(name, _enum_member(PointerMapping, definition["mapping"], name))
        case "charseq":
            char_mapping = _enum_member(CharMapping, definition.get("charset", "UTF8"), name)
            return charseq(name, char_mapping, definition.get("null_terminated", True))
        case "struct":
            return struct(name, definition["definition"])
        case "callback":
            return callback(name, definition["definition"])
        case _:
            raise TemplateError(f"Unknown type kind '{kind}' for type '{name}'")


class TypeCatalog:
    """Native types by the name templates refer to them with."""

    def __init__(self, definitions: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._types: dict[str, NativeType] = {}
        for name, definition in (definitions or {}).items():
            self._types[name] = build_type(name, definition)

    @classmethod
    def default(cls) -> "TypeCatalog":
        return cls(utils.load_resource_toml("types.default.toml"))

    def extended(self, definitions: Mapping[str, Mapping[str, Any]]) -> "TypeCatalog":
        """A copy of this catalog with ``definitions`` added on top."""
        catalog = TypeCatalog()
        catalog._types = dict(self._types)
        for name, definition in definitions.items():
            catalog._types[name] = build_type(name, definition)
        return catalog

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def resolve(self, name: str) -> NativeType:
        try:
            return self._types[name]
        except KeyError:
            raise TemplateError(f"Unknown native type '{name}'") from None
