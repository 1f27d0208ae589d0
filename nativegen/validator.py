"""Cross-reference validation of native class functions.

Runs once per function, before anything is emitted. The first violation
raises a ``ValidationError``; there is no partial validation.
"""

from nativegen import logging as nativegen_logging
from nativegen.errors import ValidationError
from nativegen.functions import NativeClassFunction, Parameter
from nativegen.modifiers import ModifierKind
from nativegen.native_types import (CallbackType, PointerMapping,
                                    PrimitiveMapping)

logger = nativegen_logging.get_logger(__name__)

REFERENCE_NOT_FOUND = "reference-not-found"
TYPE_MISMATCH = "type-mismatch"
DUPLICATE_RETURN = "duplicate-return"
NON_VOID_RETURN = "non-void-return"
MISSING_MODIFIER = "missing-modifier"
UNKNOWN_CONSTANT = "unknown-constant"


class Validator:

    def __init__(self, func: NativeClassFunction):
        self.func = func

    def _error(self, param: Parameter | None, message: str, code: str):
        location = f"{self.func.native_class.class_name}.{self.func.name}"
        if param is not None:
            location += f", parameter: {param.name}"
        raise ValidationError(f"{message} [{location}]", code)

    def _buffer_reference(self, param: Parameter, name: str, label: str) -> None:
        buffer_param = self.func.parameters.get(name)
        if buffer_param is None:
            self._error(param, f"Buffer reference does not exist: {label}({name})", REFERENCE_NOT_FOUND)
        elif not buffer_param.native_type.is_pointer:
            self._error(param, f"Buffer reference must be a pointer type: {label}({name})", TYPE_MISMATCH)
        elif not buffer_param.is_buffer_pointer:
            self._error(param, f"Buffer reference must not be a naked pointer: {label}({name})", TYPE_MISMATCH)

    def validate(self) -> None:
        return_count = 0
        for param in self.func.parameters.values():
            if param.has(ModifierKind.AUTO_SIZE):
                auto_size = param.get(ModifierKind.AUTO_SIZE)
                self._buffer_reference(param, auto_size.reference, "AutoSize")
                for dependent in auto_size.dependent:
                    self._buffer_reference(param, dependent, "AutoSize")

            if param.has(ModifierKind.AUTO_TYPE):
                name = param.get(ModifierKind.AUTO_TYPE).reference
                buffer_param = self.func.parameters.get(name)
                if buffer_param is None:
                    self._error(param, f"Buffer reference does not exist: AutoType({name})", REFERENCE_NOT_FOUND)
                elif not buffer_param.native_type.is_pointer:
                    self._error(param, f"Buffer reference must be a pointer type: AutoType({name})", TYPE_MISMATCH)
                elif buffer_param.native_type.mapping != PointerMapping.DATA:
                    self._error(param, f"Pointer reference must have a DATA mapping: AutoType({name})", TYPE_MISMATCH)

            if param.has(ModifierKind.CALLBACK_DATA):
                name = param.get(ModifierKind.CALLBACK_DATA).reference
                function_param = self.func.parameters.get(name)
                if function_param is None:
                    self._error(param, f"Function reference does not exist: CallbackData({name})", REFERENCE_NOT_FOUND)
                elif not isinstance(function_param.native_type, CallbackType):
                    self._error(param, f"Function reference must be a callback type: CallbackData({name})", TYPE_MISMATCH)

            if param.has(ModifierKind.RETURN):
                if not self.func.returns.is_void:
                    self._error(param, "The Return modifier is only for void-returning functions.", NON_VOID_RETURN)

                return_count += 1
                if return_count > 1:
                    self._error(param, "The function has more than one return value.", DUPLICATE_RETURN)

                return_mod = param.get(ModifierKind.RETURN)
                if not return_mod.is_single_value:
                    self._validate_string_return(param, return_mod)

            if param.has(ModifierKind.POINTER_ARRAY):
                pointer_array = param.get(ModifierKind.POINTER_ARRAY)
                count_param = self.func.parameters.get(pointer_array.count_param)
                if count_param is None:
                    self._error(param, f"Count reference does not exist: PointerArray({pointer_array.count_param})", REFERENCE_NOT_FOUND)
                elif count_param.native_type.mapping != PrimitiveMapping.INT:
                    self._error(param, f"Count reference must be an integer type: PointerArray({pointer_array.count_param})", TYPE_MISMATCH)
                if pointer_array.lengths_param is not None:
                    lengths_param = self.func.parameters.get(pointer_array.lengths_param)
                    if lengths_param is None:
                        self._error(param, f"Lengths reference does not exist: PointerArray({pointer_array.lengths_param})", REFERENCE_NOT_FOUND)
                    elif lengths_param.native_type.mapping != PointerMapping.DATA_INT:
                        self._error(param, f"Lengths reference must be an integer pointer type: PointerArray({pointer_array.lengths_param})", TYPE_MISMATCH)

        returns = self.func.returns
        if returns.is_buffer_pointer and not returns.is_char_sequence and not returns.has(ModifierKind.MAP_POINTER):
            self._error(None, "A buffer pointer return value requires the MapPointer modifier.", MISSING_MODIFIER)

        logger.debug("Validated %s", self.func.describe())

    def validate_links(self, constants) -> None:
        """Every bare constant name in a parameter's links must be in the frozen pool."""
        for param in self.func.parameters.values():
            for token in param.links.split():
                if "#" not in token and token not in constants:
                    self._error(param, f"Unknown constant in links: {token}", UNKNOWN_CONSTANT)

    def _validate_string_return(self, param: Parameter, return_mod) -> None:
        if not param.is_char_sequence:
            self._error(param, "A String return value must be a character sequence type.", TYPE_MISMATCH)

        max_length_param = self.func.parameters.get(return_mod.max_length_param)
        length_param = self.func.parameters.get(return_mod.length_param)
        if max_length_param is None:
            self._error(param, f"The maxLength parameter does not exist: Return({return_mod.max_length_param})", REFERENCE_NOT_FOUND)
        elif max_length_param.native_type.mapping != PrimitiveMapping.INT:
            self._error(param, f"The maxLength parameter must be an integer type: Return({return_mod.max_length_param})", TYPE_MISMATCH)
        elif length_param is None:
            self._error(param, f"The length parameter does not exist: Return({return_mod.length_param})", REFERENCE_NOT_FOUND)
        elif length_param.native_type.mapping != PointerMapping.DATA_INT:
            self._error(param, f"The length parameter must be an integer pointer type: Return({return_mod.length_param})", TYPE_MISMATCH)


def validate_function(func: NativeClassFunction) -> None:
    Validator(func).validate()


def validate_class(native_class) -> None:
    for func in native_class.functions:
        validate_function(func)


def validate_links(native_class, constants) -> None:
    for func in native_class.functions:
        Validator(func).validate_links(constants)
