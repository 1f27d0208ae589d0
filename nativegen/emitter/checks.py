"""Runtime guards emitted at the top of Java method bodies.

Baseline methods take every buffer as a ``ByteBuffer``, so element counts are
shifted into byte counts there. Alternative methods take typed buffers and
compare element counts directly.
"""

from typing import Optional

from nativegen.data_types import GenerationMode, ParameterType
from nativegen.emitter.options import DEFAULT_OPTIONS, EmitterOptions
from nativegen.functions import FUNCTION_ADDRESS, NativeClassFunction, Parameter
from nativegen.modifiers import NULL_TERMINATED, ModifierKind
from nativegen.native_types import (CallbackType, CharSequenceType,
                                    PointerMapping, PrimitiveMapping,
                                    StructType)
from nativegen.transforms import (AutoTypeTargetTransform,
                                  BufferOffsetTransform,
                                  BufferValueSizeTransform,
                                  SingleValueTransform, TransformSet,
                                  remaining)

_NT_BYTES = {
    PointerMapping.DATA_SHORT: 2,
    PointerMapping.DATA_INT: 4,
    PointerMapping.DATA_LONG: 8,
    PointerMapping.DATA_FLOAT: 4,
    PointerMapping.DATA_DOUBLE: 8,
}


def buffer_shift(expression: str, param: Parameter, shift: str, transform=None) -> str:
    """Scale ``expression`` by the element size of ``param``'s buffer."""
    if isinstance(transform, AutoTypeTargetTransform):
        mapping = transform.auto_type
    else:
        mapping = param.native_type.mapping

    byte_shift = getattr(mapping, "byte_shift", None)
    if byte_shift is None or byte_shift == "0":
        return expression

    if " " in expression:
        expression = f"({expression})"
    return f"{expression} {shift} {byte_shift}"


def _null_prefix(param: Parameter) -> str:
    return f"if ( {param.name} != null ) " if param.is_nullable else ""


def generate_checks(
    func: NativeClassFunction,
    mode: GenerationMode,
    transforms: Optional[TransformSet] = None,
    options: EmitterOptions = DEFAULT_OPTIONS,
) -> list[str]:
    """The guard statements of one method, in emission order.

    A guard may span several lines; continuation lines are indented relative
    to the first one.
    """
    transforms = transforms or TransformSet()
    checks: list[str] = []

    if func.native_class.function_provider is not None:
        checks.append(f"checkFunctionAddress({FUNCTION_ADDRESS});")

    for param in func.parameters.values():
        transform = transforms.get(param)
        if mode == GenerationMode.NORMAL or not transforms.is_skip_check(param):
            checks.extend(_parameter_checks(param, mode, transform, options))

        if param.has(ModifierKind.BUFFER_OBJECT):
            binding = param.get(ModifierKind.BUFFER_OBJECT).binding
            offset = isinstance(transform, BufferOffsetTransform)
            checks.append(f"{options.buffer_object_check}({binding}, {'true' if offset else 'false'});")

        if param.has(ModifierKind.AUTO_SIZE):
            checks.extend(_auto_size_checks(func, param, mode, transforms))

    return checks


def _parameter_checks(param: Parameter, mode: GenerationMode, transform, options: EmitterOptions) -> list[str]:
    checks = []
    native_type = param.native_type

    prefix = _null_prefix(param)
    if not param.is_nullable and native_type.mapping == PointerMapping.NAKED_POINTER \
            and not param.has(ModifierKind.CALLBACK_DATA) and not isinstance(native_type, CallbackType):
        checks.append(f"checkPointer({param.name});")

    if mode == GenerationMode.NORMAL and param.direction == ParameterType.IN \
            and isinstance(native_type, CharSequenceType) and native_type.null_terminated:
        checks.append(f"{prefix}checkNT{native_type.char_mapping.bytes}({param.name});")

    if param.direction == ParameterType.IN and param.has(NULL_TERMINATED):
        if mode == GenerationMode.NORMAL:
            checks.append(f"{prefix}checkNT{_NT_BYTES.get(native_type.mapping, 1)}({param.name});")
        else:
            checks.append(f"{prefix}checkNT({param.name});")

    if isinstance(native_type, StructType):
        checks.append(f"{prefix}checkBuffer({param.name}, {native_type.definition}.SIZEOF);")

    if param.has(ModifierKind.CHECK):
        check = param.get(ModifierKind.CHECK)
        if check.bytes:
            size = buffer_shift(check.expression, param, ">>", transform)
        elif mode == GenerationMode.NORMAL:
            size = buffer_shift(check.expression, param, "<<", transform)
        else:
            size = check.expression
        guard = f"{prefix}checkBuffer({param.name}, {size});"
        if check.debug:
            guard = f"if ( {options.debug_flag} )\n\t{guard}"
        checks.append(guard)

    return checks


def _declared_length(param: Parameter, auto_size) -> str:
    length = param.name
    if auto_size.expression is not None:
        length += auto_size.expression
    if param.native_type.mapping == PrimitiveMapping.LONG:
        length = f"(int){length}"
    return length


def _auto_size_checks(func: NativeClassFunction, param: Parameter, mode: GenerationMode, transforms: TransformSet) -> list[str]:
    checks = []
    auto_size = param.get(ModifierKind.AUTO_SIZE)
    reference = func.parameters[auto_size.reference]

    if mode == GenerationMode.NORMAL:
        length = _declared_length(param, auto_size)
        for name in (auto_size.reference, *auto_size.dependent):
            buffer_param = func.parameters[name]
            checks.append(f"{_null_prefix(buffer_param)}checkBuffer({name}, {buffer_shift(length, buffer_param, '<<')});")
        return checks

    size_transform = transforms.get(param)
    reference_transform = transforms.get(reference)
    if isinstance(reference_transform, SingleValueTransform) or isinstance(size_transform, BufferValueSizeTransform):
        expression = "1"
    elif size_transform is None or isinstance(reference_transform, BufferOffsetTransform):
        # The size parameter is still declared or the reference is only an offset
        expression = _declared_length(param, auto_size)
    else:
        expression = remaining(reference)

    for name in auto_size.dependent:
        dependent = func.parameters[name]
        if not transforms.is_skip_check(dependent):
            checks.append(f"{_null_prefix(dependent)}checkBuffer({name}, {expression});")
    return checks


def render_checks(checks: list[str], options: EmitterOptions = DEFAULT_OPTIONS) -> list[str]:
    """Wrap guards in the global checks flag; one guard needs no braces."""
    if not checks:
        return []

    lines = [f"if ( {options.checks_flag} )" + ("" if len(checks) == 1 else " {")]
    for check in checks:
        lines.extend(f"\t{line}" for line in check.splitlines())
    if len(checks) > 1:
        lines.append("}")
    return lines
