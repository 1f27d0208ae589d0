"""Template modifiers.

A modifier is an annotation attached to a function, a parameter or a return
value. The set of modifier kinds is closed: every kind is listed in
``ModifierKind`` and each element stores at most one modifier per kind.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import ClassVar, Optional

from nativegen.data_types import ParameterType
from nativegen.errors import ModifierError
from nativegen.native_types import (BufferType, CallbackType, CharSequenceType,
                                    NativeType, PointerMapping,
                                    PrimitiveMapping)


class ModifierKind(Enum):
    AUTO_SIZE = auto()
    AUTO_TYPE = auto()
    MULTI_TYPE = auto()
    CHECK = auto()
    NULLABLE = auto()
    OPTIONAL = auto()
    CONST = auto()
    NULL_TERMINATED = auto()
    EXPRESSION = auto()
    RETURN = auto()
    SINGLE_VALUE = auto()
    POINTER_ARRAY = auto()
    BUFFER_OBJECT = auto()
    MAP_POINTER = auto()
    CALLBACK_DATA = auto()
    SDK_REFERENCE = auto()
    DEPRECATED = auto()
    DEPENDS_ON = auto()


class ElementKind(Enum):
    FUNCTION = auto()
    PARAMETER = auto()
    RETURN_VALUE = auto()


_ELEMENT_NAMES = {
    frozenset({ElementKind.FUNCTION}): "functions",
    frozenset({ElementKind.PARAMETER}): "parameters",
    frozenset({ElementKind.RETURN_VALUE}): "return values",
    frozenset({ElementKind.PARAMETER, ElementKind.RETURN_VALUE}): "parameters or return values",
}

_INTEGER_MAPPINGS = {PrimitiveMapping.INT, PrimitiveMapping.LONG, PrimitiveMapping.POINTER}


class TemplateElement:
    """Anything that can carry modifiers."""

    element_kind: ClassVar[ElementKind]

    def __init__(self):
        self._modifiers: dict[ModifierKind, "TemplateModifier"] = {}
        self._modifiers_set = False

    def set_modifiers(self, *modifiers: "TemplateModifier"):
        if self._modifiers_set:
            raise ModifierError(f"Modifiers have already been set on {self.describe()}.")

        for modifier in modifiers:
            modifier.validate(self)

        table: dict[ModifierKind, TemplateModifier] = {}
        for modifier in modifiers:
            if modifier.kind in table:
                raise ModifierError(
                    f"Template modifier {type(modifier).__name__} specified more than once.")
            table[modifier.kind] = modifier

        self._modifiers = table
        self._modifiers_set = True
        return self

    def has(self, modifier: "ModifierKind | TemplateModifier") -> bool:
        if isinstance(modifier, ModifierKind):
            return modifier in self._modifiers
        return self._modifiers.get(modifier.kind) == modifier

    def get(self, kind: ModifierKind):
        return self._modifiers[kind]

    def has_ref(self, kind: ModifierKind, reference: str) -> bool:
        """True if the element has a reference modifier of ``kind`` pointing at ``reference``."""
        modifier = self._modifiers.get(kind)
        return modifier is not None and getattr(modifier, "reference", None) == reference

    @property
    def modifiers(self) -> tuple["TemplateModifier", ...]:
        return tuple(self._modifiers.values())

    @property
    def is_special(self) -> bool:
        return any(modifier.is_special for modifier in self._modifiers.values())

    def describe(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class TemplateModifier:
    kind: ClassVar[ModifierKind]
    targets: ClassVar[frozenset[ElementKind]]
    # True when the modifier requires special handling on the Java side
    is_special: ClassVar[bool] = True

    def validate(self, element: TemplateElement) -> None:
        if element.element_kind not in self.targets:
            raise ModifierError(
                f"The {type(self).__name__} modifier can only be applied on {_ELEMENT_NAMES[self.targets]}.")
        self._validate(element)

    def _validate(self, element) -> None:
        pass

    def _fail(self, message: str):
        raise ModifierError(f"{type(self).__name__}: {message}")


_PARAMETER = frozenset({ElementKind.PARAMETER})
_RETURN_VALUE = frozenset({ElementKind.RETURN_VALUE})
_FUNCTION = frozenset({ElementKind.FUNCTION})


def _require_pointer(modifier: TemplateModifier, param) -> None:
    if not param.native_type.is_pointer:
        modifier._fail(f"parameter '{param.name}' must be a pointer type.")


@dataclass(frozen=True)
class AutoSize(TemplateModifier):
    """The parameter value is the remaining size of the referenced buffer(s)."""

    kind: ClassVar[ModifierKind] = ModifierKind.AUTO_SIZE
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    reference: str
    dependent: tuple[str, ...] = ()
    expression: Optional[str] = None
    to_bytes: bool = False

    def has_reference(self, name: str) -> bool:
        return self.reference == name or name in self.dependent

    def _validate(self, param) -> None:
        if param.native_type.mapping not in _INTEGER_MAPPINGS:
            self._fail(f"parameter '{param.name}' must be an integer type.")


@dataclass(frozen=True)
class AutoType(TemplateModifier):
    """The parameter selects the element type of the referenced buffer."""

    kind: ClassVar[ModifierKind] = ModifierKind.AUTO_TYPE
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    reference: str
    types: tuple[BufferType, ...] = ()

    def _validate(self, param) -> None:
        if param.native_type.mapping != PrimitiveMapping.INT:
            self._fail(f"parameter '{param.name}' must be an int type.")
        if not self.types:
            self._fail("at least one type is required.")


@dataclass(frozen=True)
class MultiType(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.MULTI_TYPE
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    types: tuple[PointerMapping, ...] = ()

    def _validate(self, param) -> None:
        if param.native_type.mapping != PointerMapping.DATA:
            self._fail(f"parameter '{param.name}' must be a void pointer type.")
        if not self.types:
            self._fail("at least one type is required.")
        for mapping in self.types:
            if mapping.element is None:
                self._fail(f"{mapping.name} is not a typed data mapping.")


@dataclass(frozen=True)
class Check(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.CHECK
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    expression: str
    bytes: bool = False
    debug: bool = False

    def _validate(self, param) -> None:
        _require_pointer(self, param)


@dataclass(frozen=True)
class Nullable(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.NULLABLE
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER
    is_special: ClassVar[bool] = False

    def _validate(self, param) -> None:
        _require_pointer(self, param)


@dataclass(frozen=True)
class Optional_(TemplateModifier):
    """The parameter may be omitted; NULL is passed instead."""

    kind: ClassVar[ModifierKind] = ModifierKind.OPTIONAL
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    def _validate(self, param) -> None:
        _require_pointer(self, param)


@dataclass(frozen=True)
class Const(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.CONST
    targets: ClassVar[frozenset[ElementKind]] = frozenset({ElementKind.PARAMETER, ElementKind.RETURN_VALUE})
    is_special: ClassVar[bool] = False

    def _validate(self, qtype) -> None:
        if not qtype.native_type.is_pointer:
            self._fail("only pointer types can be const.")


@dataclass(frozen=True)
class NullTerminated(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.NULL_TERMINATED
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    def _validate(self, param) -> None:
        _require_pointer(self, param)


@dataclass(frozen=True)
class Expression(TemplateModifier):
    """The parameter value is a fixed expression in alternative methods."""

    kind: ClassVar[ModifierKind] = ModifierKind.EXPRESSION
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    value: str
    keep_param: bool = False


@dataclass(frozen=True)
class Return(TemplateModifier):
    """The OUT parameter becomes the return value of an alternative method.

    Without arguments this is the single value flavour (``RETURN_VALUE``).
    With a length and max length parameter the parameter is decoded into a
    String.
    """

    kind: ClassVar[ModifierKind] = ModifierKind.RETURN
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    length_param: Optional[str] = None
    max_length_param: Optional[str] = None
    max_length_expression: Optional[str] = None

    @property
    def is_single_value(self) -> bool:
        return self.length_param is None and self.max_length_param is None

    def _validate(self, param) -> None:
        _require_pointer(self, param)
        if param.direction == ParameterType.IN:
            self._fail(f"parameter '{param.name}' must be an OUT parameter.")
        if self.is_single_value:
            if param.native_type.mapping.element is None or isinstance(param.native_type, CharSequenceType):
                self._fail(f"parameter '{param.name}' must be a typed scalar buffer.")
        elif self.length_param is None or self.max_length_param is None:
            self._fail("both the length and max length parameters are required.")


@dataclass(frozen=True)
class SingleValue(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.SINGLE_VALUE
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    new_name: str

    def _validate(self, param) -> None:
        _require_pointer(self, param)
        if param.native_type.mapping.element is None:
            self._fail(f"parameter '{param.name}' must be a typed scalar buffer.")


@dataclass(frozen=True)
class PointerArray(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.POINTER_ARRAY
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    element_type: NativeType
    count_param: str
    lengths_param: Optional[str] = None

    def _validate(self, param) -> None:
        if param.native_type.mapping != PointerMapping.DATA_POINTER:
            self._fail(f"parameter '{param.name}' must be a pointer-to-pointer type.")
        if not self.element_type.is_pointer:
            self._fail("the element type must be a pointer type.")


@dataclass(frozen=True)
class BufferObject(TemplateModifier):
    """The pointer may also be an offset into the buffer object bound to ``binding``."""

    kind: ClassVar[ModifierKind] = ModifierKind.BUFFER_OBJECT
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    binding: str

    def _validate(self, param) -> None:
        _require_pointer(self, param)


@dataclass(frozen=True)
class MapPointer(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.MAP_POINTER
    targets: ClassVar[frozenset[ElementKind]] = _RETURN_VALUE

    size_expression: str

    def _validate(self, returns) -> None:
        if not returns.native_type.is_pointer:
            self._fail("the return value must be a pointer type.")


@dataclass(frozen=True)
class CallbackData(TemplateModifier):
    kind: ClassVar[ModifierKind] = ModifierKind.CALLBACK_DATA
    targets: ClassVar[frozenset[ElementKind]] = _PARAMETER

    reference: str

    def _validate(self, param) -> None:
        if param.native_type.mapping != PointerMapping.NAKED_POINTER or isinstance(param.native_type, CallbackType):
            self._fail(f"parameter '{param.name}' must be an opaque pointer.")


@dataclass(frozen=True)
class SdkReference(TemplateModifier):
    """Alternative function name for the SDK reference page link."""

    kind: ClassVar[ModifierKind] = ModifierKind.SDK_REFERENCE
    targets: ClassVar[frozenset[ElementKind]] = _FUNCTION
    is_special: ClassVar[bool] = False

    function: str

    def _validate(self, func) -> None:
        if func.native_class.postfix:
            self._fail("can only be applied on core functionality.")


@dataclass(frozen=True)
class Deprecated(TemplateModifier):
    """The function is unavailable in the Core profile."""

    kind: ClassVar[ModifierKind] = ModifierKind.DEPRECATED
    targets: ClassVar[frozenset[ElementKind]] = _FUNCTION
    is_special: ClassVar[bool] = False


@dataclass(frozen=True)
class DependsOn(TemplateModifier):
    """The function is only available together with ``reference``, e.g. another extension."""

    kind: ClassVar[ModifierKind] = ModifierKind.DEPENDS_ON
    targets: ClassVar[frozenset[ElementKind]] = _FUNCTION
    is_special: ClassVar[bool] = False

    reference: str


NULLABLE = Nullable()
OPTIONAL = Optional_()
CONST = Const()
NULL_TERMINATED = NullTerminated()
RETURN_VALUE = Return()
DEPRECATED = Deprecated()
