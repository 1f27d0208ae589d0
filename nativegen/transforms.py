"""Function transforms used by alternative methods.

A transform rewrites the declaration and the call-site text of one parameter
or return value. Transforms never touch the function graph; an alternative
method looks them up in its own ``TransformSet``.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from nativegen.functions import POINTER_POSTFIX, Parameter, QualifiedType
from nativegen.modifiers import ModifierKind
from nativegen.native_types import CharSequenceType, PointerMapping

API_BUFFER = "__buffer"


class FunctionTransform:

    def transform_declaration(self, qtype: QualifiedType, original: str) -> Optional[str]:
        """The new declaration, or None to remove the parameter from the signature."""
        return original

    def transform_call(self, qtype: QualifiedType, original: str) -> str:
        return original


class PreFunctionTransform(FunctionTransform):
    """Emits statements before the native call."""

    def preprocess(self, qtype: QualifiedType) -> list[str]:
        raise NotImplementedError


class APIBufferFunctionTransform(FunctionTransform):
    """Stages values in the per-call scratch buffer."""

    def setup_api_buffer(self, qtype: QualifiedType) -> list[str]:
        raise NotImplementedError


class SkipCheckFunctionTransform(FunctionTransform):
    """Marker: the default guards of the transformed parameter are skipped."""


def remaining(buffer_param: Parameter) -> str:
    if buffer_param.is_nullable:
        return f"{buffer_param.name} == null ? 0 : {buffer_param.name}.remaining()"
    return f"{buffer_param.name}.remaining()"


@dataclass(frozen=True)
class AutoSizeTransform(FunctionTransform):
    buffer_param: Parameter
    byte_shift: str = "0"

    def transform_declaration(self, qtype, original):
        return None

    def transform_call(self, qtype, original):
        if self.byte_shift == "0":
            return remaining(self.buffer_param)
        if self.buffer_param.is_nullable:
            return f"({remaining(self.buffer_param)}) << {self.byte_shift}"
        return f"{remaining(self.buffer_param)} << {self.byte_shift}"


@dataclass(frozen=True)
class AutoTypeParamTransform(FunctionTransform):
    auto_type: str

    def transform_declaration(self, qtype, original):
        return None

    def transform_call(self, qtype, original):
        return self.auto_type


@dataclass(frozen=True)
class AutoTypeParamWithSignTransform(FunctionTransform):
    unsigned_type: str
    signed_type: str

    def transform_declaration(self, qtype, original):
        return "boolean unsigned"

    def transform_call(self, qtype, original):
        return f"unsigned ? {self.unsigned_type} : {self.signed_type}"


@dataclass(frozen=True)
class AutoTypeTargetTransform(FunctionTransform):
    """Fixes the element type of a void pointer parameter."""

    auto_type: PointerMapping

    def transform_declaration(self, qtype, original):
        return f"{self.auto_type.java_type} {qtype.name}"


class BufferOffsetTransform(SkipCheckFunctionTransform):

    def transform_declaration(self, qtype, original):
        return f"long {qtype.name}Offset"

    def transform_call(self, qtype, original):
        return f"{qtype.name}Offset"


@dataclass(frozen=True)
class ExpressionTransform(SkipCheckFunctionTransform):
    expression: str
    keep_param: bool = False

    def transform_declaration(self, qtype, original):
        return original if self.keep_param else None

    def transform_call(self, qtype, original):
        return self.expression


@dataclass(frozen=True)
class ExpressionLocalTransform(ExpressionTransform, PreFunctionTransform):
    """Declares the parameter as a local computed from ``expression``."""

    def transform_call(self, qtype, original):
        return original

    def preprocess(self, qtype):
        return [f"{qtype.as_java_method_param} = {self.expression};"]


class CharSequenceTransform(FunctionTransform):

    def transform_declaration(self, qtype, original):
        return f"CharSequence {qtype.name}"

    def transform_call(self, qtype, original):
        return f"memAddress(memEncode{qtype.native_type.char_mapping.charset}({qtype.name}))"


class StringReturnTransform(FunctionTransform):

    def transform_declaration(self, qtype, original):
        return "String"

    def transform_call(self, qtype, original):
        return f"memDecode{qtype.native_type.char_mapping.charset}({original})"


@dataclass(frozen=True)
class BufferValueReturnTransform(APIBufferFunctionTransform):
    """Turns a void return into the value of a single-value OUT parameter."""

    buffer_type: str
    param_name: str

    def transform_declaration(self, qtype, original):
        return "long" if self.buffer_type == "pointer" else self.buffer_type

    def transform_call(self, qtype, original):
        return f"return {API_BUFFER}.{self.buffer_type}Value({self.param_name});"

    def setup_api_buffer(self, qtype):
        return [f"int {self.param_name} = {API_BUFFER}.{self.buffer_type}Param();"]


class BufferValueParameterTransform(SkipCheckFunctionTransform):

    def transform_declaration(self, qtype, original):
        return None

    def transform_call(self, qtype, original):
        return f"{API_BUFFER}.address() + {qtype.name}"


class BufferValueSizeTransform(FunctionTransform):

    def transform_declaration(self, qtype, original):
        return None

    def transform_call(self, qtype, original):
        return "1"


@dataclass(frozen=True)
class SingleValueTransform(APIBufferFunctionTransform, SkipCheckFunctionTransform):
    primitive_type: str
    param_name: str
    new_name: str

    def transform_declaration(self, qtype, original):
        java_type = "long" if self.primitive_type == "pointer" else self.primitive_type
        return f"{java_type} {self.new_name}"

    def transform_call(self, qtype, original):
        return f"{API_BUFFER}.address() + {self.param_name}"

    def setup_api_buffer(self, qtype):
        return [
            f"int {self.param_name} = {API_BUFFER}.{self.primitive_type}Param();",
            f"{API_BUFFER}.{self.primitive_type}Value({self.param_name}, {self.new_name});",
        ]


class MapPointerTransform(FunctionTransform):
    """Wraps the returned address, reusing ``old_buffer`` when it still matches."""

    # Trailing parameters appended to the signature
    extra_params = ("ByteBuffer old_buffer",)

    def transform_declaration(self, qtype, original):
        return "ByteBuffer"

    def transform_call(self, qtype, original):
        size_expression = qtype.get(ModifierKind.MAP_POINTER).size_expression
        return (
            f"int size = {size_expression};\n"
            "return __result == memAddress0(old_buffer) && old_buffer.capacity() == size "
            "? old_buffer : memByteBuffer(__result, size);"
        )


class MapPointerExplicitTransform(MapPointerTransform):
    extra_params = ("int size", "ByteBuffer old_buffer")

    def transform_call(self, qtype, original):
        return "__result == memAddress0(old_buffer) && old_buffer.capacity() == size ? old_buffer : memByteBuffer(__result, size)"


class StringLengthTransform(APIBufferFunctionTransform, SkipCheckFunctionTransform):

    def transform_declaration(self, qtype, original):
        return None

    def transform_call(self, qtype, original):
        return f"{API_BUFFER}.address() + {qtype.name}"

    def setup_api_buffer(self, qtype):
        return [f"int {qtype.name} = {API_BUFFER}.intParam();"]


class StringParamTransform(APIBufferFunctionTransform, SkipCheckFunctionTransform):

    def transform_declaration(self, qtype, original):
        return None

    def transform_call(self, qtype, original):
        return f"{API_BUFFER}.address() + {qtype.name}"

    def setup_api_buffer(self, qtype):
        max_length_param = qtype.get(ModifierKind.RETURN).max_length_param
        return [f"int {qtype.name} = {API_BUFFER}.bufferParam({max_length_param});"]


@dataclass(frozen=True)
class StringParamReturnTransform(FunctionTransform):
    param_name: str
    length_param: str
    encoding: str

    def transform_declaration(self, qtype, original):
        return "String"

    def transform_call(self, qtype, original):
        return (
            f"return memDecode{self.encoding}(memByteBuffer({API_BUFFER}.address() + {self.param_name}, "
            f"{API_BUFFER}.intValue({self.length_param})));"
        )


@dataclass(frozen=True)
class PointerArrayTransform(APIBufferFunctionTransform):
    """Builds a pointer table in the scratch buffer from one element or an array."""

    multi: bool

    @staticmethod
    def _element_java_type(param) -> str:
        element_type = param.get(ModifierKind.POINTER_ARRAY).element_type
        if isinstance(element_type, CharSequenceType):
            return "CharSequence"
        return element_type.mapping.java_type

    def transform_declaration(self, qtype, original):
        element = self._element_java_type(qtype)
        if self.multi:
            return f"{element}[] {qtype.name}"
        return f"{element} {qtype.name}"

    def transform_call(self, qtype, original):
        return f"{API_BUFFER}.address() + {qtype.name}{POINTER_POSTFIX}"

    def setup_api_buffer(self, qtype):
        element_type = qtype.get(ModifierKind.POINTER_ARRAY).element_type
        name = qtype.name
        address = f"{name}{POINTER_POSTFIX}"
        encode = None
        if isinstance(element_type, CharSequenceType):
            encode = f"memEncode{element_type.char_mapping.charset}"

        if self.multi:
            lines = [f"int {address} = {API_BUFFER}.bufferParam({name}.length << PointerBuffer.getPointerSizeShift());"]
            # The encoded buffers must stay reachable until the call returns
            if encode:
                lines.append(f"ByteBuffer[] {name}Buffers = new ByteBuffer[{name}.length];")
                element = f"{name}Buffers[i] = {encode}({name}[i])"
            else:
                element = f"{name}[i]"
            lines.append(f"for ( int i = 0; i < {name}.length; i++ )")
            lines.append(
                f"\t{API_BUFFER}.pointerValue({address} + (i << PointerBuffer.getPointerSizeShift()), memAddress({element}));")
            return lines

        lines = [f"int {address} = {API_BUFFER}.pointerParam();"]
        if encode:
            lines.append(f"ByteBuffer {name}Buffer = {encode}({name});")
            lines.append(f"{API_BUFFER}.pointerValue({address}, memAddress({name}Buffer));")
        else:
            lines.append(f"{API_BUFFER}.pointerValue({address}, memAddress({name}));")
        return lines


BUFFER_OFFSET = BufferOffsetTransform()
CHAR_SEQUENCE = CharSequenceTransform()
STRING_RETURN = StringReturnTransform()
BUFFER_VALUE_PARAMETER = BufferValueParameterTransform()
BUFFER_VALUE_SIZE = BufferValueSizeTransform()
MAP_POINTER = MapPointerTransform()
MAP_POINTER_EXPLICIT = MapPointerExplicitTransform()
STRING_LENGTH = StringLengthTransform()
STRING_PARAM = StringParamTransform()
POINTER_ARRAY_SINGLE = PointerArrayTransform(multi=False)
POINTER_ARRAY_MULTI = PointerArrayTransform(multi=True)


class TransformSet:
    """An immutable mapping from parameter/return slots to transforms.

    Every alternative method gets its own set, derived from a shared base with
    ``with_transform`` and ``without``. Iteration follows slot order: the
    return value first, then the parameters in declaration order.
    """

    def __init__(self, entries: Optional[dict] = None):
        self._entries: dict[int, tuple[QualifiedType, FunctionTransform]] = dict(entries or {})

    def with_transform(self, qtype: QualifiedType, transform: FunctionTransform) -> "TransformSet":
        entries = dict(self._entries)
        entries[qtype.slot] = (qtype, transform)
        return TransformSet(entries)

    def without(self, qtype: Optional[QualifiedType]) -> "TransformSet":
        if qtype is None or qtype.slot not in self._entries:
            return self
        entries = dict(self._entries)
        del entries[qtype.slot]
        return TransformSet(entries)

    def get(self, qtype: QualifiedType) -> Optional[FunctionTransform]:
        entry = self._entries.get(qtype.slot)
        return entry[1] if entry is not None else None

    def __contains__(self, qtype: QualifiedType) -> bool:
        return qtype.slot in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterator[tuple[QualifiedType, FunctionTransform]]:
        for slot in sorted(self._entries):
            yield self._entries[slot]

    def is_skip_check(self, qtype: QualifiedType) -> bool:
        return isinstance(self.get(qtype), SkipCheckFunctionTransform)

    def declaration_or_else(self, qtype: QualifiedType, original: str) -> Optional[str]:
        transform = self.get(qtype)
        if transform is None:
            return original
        return transform.transform_declaration(qtype, original)

    def call_or_else(self, qtype: QualifiedType, original: str) -> str:
        transform = self.get(qtype)
        if transform is None:
            return original
        return transform.transform_call(qtype, original)

    def __repr__(self) -> str:
        described = ", ".join(f"{qtype.describe()}: {type(transform).__name__}" for qtype, transform in self.items())
        return f"TransformSet({described})"
