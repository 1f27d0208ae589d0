"""Classification of native types.

The generator never looks at C declarations. Every type a template uses is
described here by a mapping kind, which is all the transform engine and the
emitters need to know about it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PrimitiveMapping(Enum):
    # (java type, jni type, size in bytes)
    VOID = ("void", "void", 0)
    BOOLEAN = ("boolean", "jboolean", 1)
    BYTE = ("byte", "jbyte", 1)
    SHORT = ("short", "jshort", 2)
    INT = ("int", "jint", 4)
    LONG = ("long", "jlong", 8)
    POINTER = ("long", "jlong", None)
    FLOAT = ("float", "jfloat", 4)
    DOUBLE = ("double", "jdouble", 8)

    def __init__(self, java_type: str, jni_type: str, size: Optional[int]):
        self.java_type = java_type
        self.jni_type = jni_type
        self.size = size


class PointerMapping(Enum):
    # (java buffer type, element byte shift, scalar element name)
    NAKED_POINTER = ("long", None, None)
    DATA = ("ByteBuffer", "0", None)
    DATA_POINTER = ("PointerBuffer", "PointerBuffer.getPointerSizeShift()", "pointer")
    DATA_BYTE = ("ByteBuffer", "0", "byte")
    DATA_SHORT = ("ShortBuffer", "1", "short")
    DATA_INT = ("IntBuffer", "2", "int")
    DATA_LONG = ("LongBuffer", "3", "long")
    DATA_FLOAT = ("FloatBuffer", "2", "float")
    DATA_DOUBLE = ("DoubleBuffer", "3", "double")

    def __init__(self, java_type: str, byte_shift: Optional[str], element: Optional[str]):
        self.java_type = java_type
        self.byte_shift = byte_shift
        self.element = element

    @property
    def is_multi_byte(self) -> bool:
        return self.byte_shift is not None and self.byte_shift != "0"


class CharMapping(Enum):
    ASCII = (1, "ASCII")
    UTF8 = (1, "UTF8")
    UTF16 = (2, "UTF16")

    def __init__(self, width: int, charset: str):
        self.bytes = width
        self.charset = charset


class BufferType(Enum):
    """GL element type constants an AutoType parameter can select."""

    GL_BYTE = (0x1400, PointerMapping.DATA_BYTE)
    GL_UNSIGNED_BYTE = (0x1401, PointerMapping.DATA_BYTE)
    GL_SHORT = (0x1402, PointerMapping.DATA_SHORT)
    GL_UNSIGNED_SHORT = (0x1403, PointerMapping.DATA_SHORT)
    GL_INT = (0x1404, PointerMapping.DATA_INT)
    GL_UNSIGNED_INT = (0x1405, PointerMapping.DATA_INT)
    GL_LONG = (0x140E, PointerMapping.DATA_LONG)
    GL_UNSIGNED_LONG = (0x140F, PointerMapping.DATA_LONG)
    GL_FLOAT = (0x1406, PointerMapping.DATA_FLOAT)
    GL_DOUBLE = (0x140A, PointerMapping.DATA_DOUBLE)

    def __init__(self, code: int, mapping: PointerMapping):
        self.code = code
        self.mapping = mapping

    @property
    def constant(self) -> str:
        return f"GL11.{self.name}"

    @property
    def unsigned(self) -> Optional["BufferType"]:
        return _UNSIGNED_PAIRS.get(self)


_UNSIGNED_PAIRS = {
    BufferType.GL_BYTE: BufferType.GL_UNSIGNED_BYTE,
    BufferType.GL_SHORT: BufferType.GL_UNSIGNED_SHORT,
    BufferType.GL_INT: BufferType.GL_UNSIGNED_INT,
    BufferType.GL_LONG: BufferType.GL_UNSIGNED_LONG,
}


@dataclass(frozen=True)
class NativeType:
    name: str
    mapping: PrimitiveMapping | PointerMapping

    @property
    def is_pointer(self) -> bool:
        return False

    @property
    def java_method_type(self) -> str:
        return self.mapping.java_type

    @property
    def native_method_type(self) -> str:
        return self.mapping.java_type

    @property
    def jni_function_type(self) -> str:
        return self.mapping.jni_type


@dataclass(frozen=True)
class PrimitiveType(NativeType):
    pass


@dataclass(frozen=True)
class PointerType(NativeType):

    @property
    def is_pointer(self) -> bool:
        return True

    @property
    def native_method_type(self) -> str:
        return "long"

    @property
    def jni_function_type(self) -> str:
        return "jlong"


@dataclass(frozen=True)
class CharSequenceType(PointerType):
    char_mapping: CharMapping = CharMapping.UTF8
    null_terminated: bool = True


@dataclass(frozen=True)
class StructType(PointerType):
    definition: str = ""


@dataclass(frozen=True)
class CallbackType(PointerType):
    definition: str = ""

    @property
    def java_method_type(self) -> str:
        return self.definition


VOID = PrimitiveType("void", PrimitiveMapping.VOID)


def primitive(name: str, mapping: PrimitiveMapping) -> PrimitiveType:
    return PrimitiveType(name, mapping)


def pointer(name: str, mapping: PointerMapping) -> PointerType:
    return PointerType(name, mapping)


def charseq(name: str, char_mapping: CharMapping = CharMapping.UTF8, null_terminated: bool = True) -> CharSequenceType:
    mapping = PointerMapping.DATA_SHORT if char_mapping.bytes == 2 else PointerMapping.DATA_BYTE
    return CharSequenceType(name, mapping, char_mapping, null_terminated)


def struct(name: str, definition: str) -> StructType:
    return StructType(name, PointerMapping.DATA, definition)


def callback(name: str, definition: str) -> CallbackType:
    return CallbackType(name, PointerMapping.NAKED_POINTER, definition)
