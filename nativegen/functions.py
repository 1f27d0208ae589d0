from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from nativegen.constants import ConstantBlock
from nativegen.data_types import ParameterType
from nativegen.errors import ResolutionError, TemplateError
from nativegen.modifiers import ElementKind, ModifierKind, TemplateElement
from nativegen.naming import jni_mangle
from nativegen.native_types import (VOID, CallbackType, CharSequenceType,
                                    NativeType, PointerMapping,
                                    PrimitiveMapping)

RESULT = "__result"
POINTER_POSTFIX = "Address"
FUNCTION_ADDRESS = "__functionAddress"


class QualifiedType(TemplateElement):
    """A native type with modifiers; either a parameter or a return value."""

    def __init__(self, native_type: NativeType):
        super().__init__()
        self.native_type = native_type
        # Stable index into transform tables, assigned by the owning function.
        self.slot = -1

    @property
    def is_void(self) -> bool:
        return self.native_type.mapping == PrimitiveMapping.VOID

    @property
    def is_buffer_pointer(self) -> bool:
        return self.native_type.is_pointer and self.native_type.mapping != PointerMapping.NAKED_POINTER

    @property
    def is_char_sequence(self) -> bool:
        return isinstance(self.native_type, CharSequenceType)

    @property
    def to_native_type(self) -> str:
        if self.has(ModifierKind.CONST):
            return f"const {self.native_type.name}"
        return self.native_type.name


class ReturnValue(QualifiedType):
    element_kind = ElementKind.RETURN_VALUE

    @property
    def java_method_type(self) -> str:
        if self.is_buffer_pointer:
            return "ByteBuffer"
        return self.native_type.java_method_type

    @property
    def native_method_type(self) -> str:
        return self.native_type.native_method_type

    @property
    def jni_function_type(self) -> str:
        return self.native_type.jni_function_type

    def describe(self) -> str:
        return f"return value ({self.native_type.name})"


class Parameter(QualifiedType):
    element_kind = ElementKind.PARAMETER

    def __init__(
        self,
        native_type: NativeType,
        name: str,
        direction: ParameterType,
        documentation: str,
        links: str = "",
    ):
        super().__init__(native_type)
        self.name = name
        self.direction = direction
        self.documentation = documentation
        self.links = links

    @property
    def java_method_type(self) -> str:
        if self.is_buffer_pointer:
            return self.native_type.mapping.java_type
        return self.native_type.java_method_type

    @property
    def as_java_method_param(self) -> str:
        return f"{self.java_method_type} {self.name}"

    @property
    def as_native_method_param(self) -> str:
        return f"{self.native_type.native_method_type} {self.name}"

    @property
    def as_jni_function_param(self) -> str:
        if self.native_type.is_pointer:
            return f"jlong {self.name}{POINTER_POSTFIX}"
        return f"{self.native_type.jni_function_type} {self.name}"

    @property
    def is_nullable(self) -> bool:
        return self.has(ModifierKind.NULLABLE) or self.has(ModifierKind.OPTIONAL)

    @property
    def native_call_param(self) -> str:
        """The expression passed to the native method for this parameter."""
        if self.has(ModifierKind.CALLBACK_DATA):
            reference = self.get(ModifierKind.CALLBACK_DATA).reference
            return f"{reference} == null ? NULL : memGlobalRefNew({reference})"
        if isinstance(self.native_type, CallbackType):
            return f"{self.name} == null ? NULL : {self.name}.getPointer()"
        if self.is_buffer_pointer:
            return f"memAddressSafe({self.name})" if self.is_nullable else f"memAddress({self.name})"
        return self.name

    def describe(self) -> str:
        return f"parameter '{self.name}'"


@dataclass(frozen=True)
class FunctionProvider:
    """Resolves function addresses at runtime.

    ``address`` is a format string with a ``{function}`` placeholder, e.g.
    ``GL.getCapabilities().{function}``.
    """

    name: str
    address: str

    def function_address(self, func: "NativeClassFunction") -> str:
        return f"long {FUNCTION_ADDRESS} = {self.address.format(function=func.name)};"


class Function(TemplateElement):
    element_kind = ElementKind.FUNCTION

    def __init__(self, returns: ReturnValue, name: str, documentation: str, *params: Parameter):
        super().__init__()
        self.returns = returns
        self.name = name
        self.documentation = documentation
        # Insertion order is the native call order.
        self.parameters: dict[str, Parameter] = {}
        returns.slot = 0
        for index, param in enumerate(params, start=1):
            if param.name in self.parameters:
                raise TemplateError(f"Duplicate parameter '{param.name}' in function {name}")
            param.slot = index
            self.parameters[param.name] = param

    def describe(self) -> str:
        return f"function {self.name}"

    def get_params(self, predicate: Callable[[Parameter], bool]) -> Iterator[Parameter]:
        return (param for param in self.parameters.values() if predicate(param))

    def has_param(self, predicate: Callable[[Parameter], bool]) -> bool:
        return any(True for _ in self.get_params(predicate))

    def get_reference_param(self, kind: ModifierKind, reference: str) -> Optional[Parameter]:
        """The parameter whose ``kind`` modifier references ``reference``, if any."""
        matches = list(self.get_params(lambda param: param.has_ref(kind, reference)))
        if len(matches) > 1:
            raise ResolutionError(
                f"More than one parameter references '{reference}' in {self.name}.")
        return matches[0] if matches else None


class NativeClassFunction(Function):

    def __init__(
        self,
        returns: ReturnValue,
        name: str,
        documentation: str,
        native_class: "NativeClass",
        *params: Parameter,
    ):
        super().__init__(returns, name, documentation, *params)
        self.native_class = native_class

    def describe(self) -> str:
        return f"{self.native_class.class_name}.{self.name}"

    def has_simple_params_only(self) -> bool:
        if self.returns.is_buffer_pointer or self.returns.is_special:
            return False
        return not self.has_param(lambda param: param.is_buffer_pointer or param.is_special)

    @property
    def is_simple_function(self) -> bool:
        return self.native_class.function_provider is None and self.has_simple_params_only()


@dataclass
class NativeClass:
    package: str
    class_name: str
    template_name: str = ""
    # Method prefix ("gl") and constant prefix ("GL_")
    prefix_method: str = ""
    prefix_constant: str = ""
    # Extension postfix, e.g. "ARB"
    postfix: str = ""
    function_provider: Optional[FunctionProvider] = None
    documentation: str = ""
    native_imports: list[str] = field(default_factory=list)
    constant_blocks: list[ConstantBlock] = field(default_factory=list)
    functions: list[NativeClassFunction] = field(default_factory=list)
    # Format string with a {function} placeholder
    reference_url: Optional[str] = None
    # Reference pages of functions removed from the Core profile
    deprecated_reference_url: Optional[str] = None

    @property
    def native_file_name(self) -> str:
        return jni_mangle(f"{self.package}.{self.class_name}")

    def func(self, returns: ReturnValue | NativeType, name: str, documentation: str, *params: Parameter) -> NativeClassFunction:
        if isinstance(returns, NativeType):
            returns = ReturnValue(returns)
        function = NativeClassFunction(returns, f"{self.prefix_method}{name}", documentation, self, *params)
        self.functions.append(function)
        return function

    def constants(self, documentation: str, *constants) -> ConstantBlock:
        block = ConstantBlock(documentation, tuple(constants))
        self.constant_blocks.append(block)
        return block


def param_in(native_type: NativeType, name: str, documentation: str, links: str = "") -> Parameter:
    return Parameter(native_type, name, ParameterType.IN, documentation, links)


def param_out(native_type: NativeType, name: str, documentation: str, links: str = "") -> Parameter:
    return Parameter(native_type, name, ParameterType.OUT, documentation, links)


def param_inout(native_type: NativeType, name: str, documentation: str, links: str = "") -> Parameter:
    return Parameter(native_type, name, ParameterType.INOUT, documentation, links)


def return_value(native_type: NativeType = VOID) -> ReturnValue:
    return ReturnValue(native_type)
