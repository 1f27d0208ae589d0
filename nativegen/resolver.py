"""Decides which alternative methods a native function gets.

Alternatives are computed in a fixed order:

1. return value transform (string decoding or mapped pointer),
2. one buffer object offset overload per ``BufferObject`` parameter,
3. the base set: char sequence encoding, ``AutoSize``, ``Expression`` and
   ``optional`` parameters,
4. the general alternative built from the base set,
5. the explicit size overload of a mapped pointer return,
6. ``Return`` overloads,
7. ``SingleValue`` overloads,
8. ``MultiType`` overloads,
9. ``AutoType`` overloads,
10. ``PointerArray`` overloads.

Each overload is the base set plus its own delta, so the resulting list only
depends on the function declaration.
"""

from dataclasses import dataclass
from typing import Iterator

from nativegen import logging as nativegen_logging
from nativegen.data_types import ParameterType
from nativegen.errors import ResolutionError
from nativegen.functions import NativeClassFunction, Parameter
from nativegen.modifiers import OPTIONAL, ModifierKind
from nativegen.naming import strip_postfix
from nativegen.native_types import BufferType, CharSequenceType
from nativegen.transforms import (BUFFER_OFFSET, BUFFER_VALUE_PARAMETER,
                                  BUFFER_VALUE_SIZE, CHAR_SEQUENCE,
                                  MAP_POINTER, MAP_POINTER_EXPLICIT,
                                  POINTER_ARRAY_MULTI, POINTER_ARRAY_SINGLE,
                                  STRING_LENGTH, STRING_PARAM, STRING_RETURN,
                                  AutoSizeTransform,
                                  AutoTypeParamTransform,
                                  AutoTypeParamWithSignTransform,
                                  AutoTypeTargetTransform,
                                  BufferValueReturnTransform,
                                  ExpressionLocalTransform,
                                  ExpressionTransform, SingleValueTransform,
                                  StringParamReturnTransform, TransformSet)

logger = nativegen_logging.get_logger(__name__)


@dataclass(frozen=True)
class Variant:
    """One alternative method: its name, javadoc description and transforms."""

    name: str
    description: str
    transforms: TransformSet


class VariantResolver:

    def __init__(self, func: NativeClassFunction):
        self.func = func
        self.stripped_name = strip_postfix(func)
        self.typed_name = strip_postfix(func, strip_type=True)

    def _param(self, name: str) -> Parameter:
        param = self.func.parameters.get(name)
        if param is None:
            raise ResolutionError(f"Unknown parameter '{name}' referenced in {self.func.describe()}.")
        return param

    def _auto_size_params(self, reference: str) -> Iterator[Parameter]:
        return self.func.get_params(
            lambda param: param.has(ModifierKind.AUTO_SIZE) and param.get(ModifierKind.AUTO_SIZE).has_reference(reference))

    def return_transforms(self) -> TransformSet:
        returns = self.func.returns
        transforms = TransformSet()
        if isinstance(returns.native_type, CharSequenceType):
            return transforms.with_transform(returns, STRING_RETURN)
        if returns.has(ModifierKind.MAP_POINTER):
            return transforms.with_transform(returns, MAP_POINTER)
        return transforms

    def base_transforms(self, transforms: TransformSet) -> TransformSet:
        for param in self.func.parameters.values():
            if param.direction == ParameterType.IN and param.is_char_sequence:
                transforms = transforms.with_transform(param, CHAR_SEQUENCE)
            elif param.has(ModifierKind.AUTO_SIZE):
                buffer_param = self._param(param.get(ModifierKind.AUTO_SIZE).reference)
                # AutoSize on MultiType buffers is resolved per element type
                if not (buffer_param.has(ModifierKind.AUTO_SIZE) or buffer_param.has(ModifierKind.MULTI_TYPE)):
                    transforms = transforms.with_transform(param, AutoSizeTransform(buffer_param))
            elif param.has(ModifierKind.EXPRESSION):
                expression = param.get(ModifierKind.EXPRESSION)
                transforms = transforms.with_transform(param, ExpressionTransform(expression.value, expression.keep_param))
            elif param.has(OPTIONAL):
                transforms = transforms.with_transform(param, ExpressionTransform("0L"))
        return transforms

    def resolve(self) -> list[Variant]:
        func = self.func
        variants: list[Variant] = []

        return_set = self.return_transforms()
        for param in func.get_params(lambda param: param.has(ModifierKind.BUFFER_OBJECT)):
            variants.append(Variant(
                self.stripped_name, "Buffer object offset version of:",
                return_set.with_transform(param, BUFFER_OFFSET)))

        base = self.base_transforms(return_set)
        has_multi_byte = func.has_param(
            lambda param: param.is_buffer_pointer and param.native_type.mapping.is_multi_byte)
        if len(base) or has_multi_byte:
            variants.append(Variant(self.typed_name, "Alternative version of:", base))

        if func.returns.has(ModifierKind.MAP_POINTER):
            variants.append(Variant(
                self.typed_name, "Explicit size alternative version of:",
                base.with_transform(func.returns, MAP_POINTER_EXPLICIT)))

        variants.extend(self.return_variants(base))
        variants.extend(self.single_value_variants(base))
        variants.extend(self.multi_type_variants(base))
        variants.extend(self.auto_type_variants(base))
        variants.extend(self.pointer_array_variants(base))

        for variant in variants:
            logger.debug("%s -> %s %s", func.describe(), variant.name, variant.transforms)
        return variants

    def return_variants(self, base: TransformSet) -> Iterator[Variant]:
        returns = self.func.returns
        for param in self.func.get_params(lambda param: param.has(ModifierKind.RETURN)):
            return_mod = param.get(ModifierKind.RETURN)

            if return_mod.is_single_value:
                transforms = base.with_transform(
                    returns, BufferValueReturnTransform(param.native_type.mapping.element, param.name))
                for auto_size in self._auto_size_params(param.name):
                    transforms = transforms.with_transform(auto_size, BUFFER_VALUE_SIZE)
                transforms = transforms.with_transform(param, BUFFER_VALUE_PARAMETER)
                yield Variant(self.stripped_name, "Single return value version of:", transforms)
                continue

            max_length_param = self._param(return_mod.max_length_param)
            transforms = (
                base.without(max_length_param)
                .with_transform(self._param(return_mod.length_param), STRING_LENGTH)
                .with_transform(param, STRING_PARAM)
                .with_transform(returns, StringParamReturnTransform(
                    param.name, return_mod.length_param, param.native_type.char_mapping.charset))
            )
            yield Variant(self.stripped_name, "String return version of:", transforms)

            if return_mod.max_length_expression is not None:
                yield Variant(
                    self.stripped_name, "String return (w/ implicit max length) version of:",
                    transforms.with_transform(max_length_param, ExpressionLocalTransform(return_mod.max_length_expression)))

    def single_value_variants(self, base: TransformSet) -> Iterator[Variant]:
        for param in self.func.get_params(lambda param: param.has(ModifierKind.SINGLE_VALUE)):
            transforms = base
            for auto_size in self._auto_size_params(param.name):
                transforms = transforms.with_transform(auto_size, BUFFER_VALUE_SIZE)
            transforms = transforms.with_transform(param, SingleValueTransform(
                param.native_type.mapping.element, param.name, param.get(ModifierKind.SINGLE_VALUE).new_name))
            yield Variant(self.stripped_name, "Single value version of:", transforms)

    def _with_auto_size(self, base: TransformSet) -> TransformSet:
        transforms = base
        for param in self.func.get_params(lambda param: param.has(ModifierKind.AUTO_SIZE)):
            buffer_param = self._param(param.get(ModifierKind.AUTO_SIZE).reference)
            transforms = transforms.with_transform(param, AutoSizeTransform(buffer_param))
        return transforms

    def _with_byte_size(self, transforms: TransformSet, buffer_param: Parameter, byte_shift: str) -> TransformSet:
        param = self.func.get_reference_param(ModifierKind.AUTO_SIZE, buffer_param.name)
        if param is not None and param.get(ModifierKind.AUTO_SIZE).to_bytes:
            transforms = transforms.with_transform(param, AutoSizeTransform(buffer_param, byte_shift))
        return transforms

    def multi_type_variants(self, base: TransformSet) -> Iterator[Variant]:
        for param in self.func.get_params(lambda param: param.has(ModifierKind.MULTI_TYPE)):
            typed_base = self._with_auto_size(base)
            for mapping in param.get(ModifierKind.MULTI_TYPE).types:
                transforms = self._with_byte_size(typed_base, param, mapping.byte_shift)
                transforms = transforms.with_transform(param, AutoTypeTargetTransform(mapping))
                yield Variant(self.stripped_name, f"{mapping.java_type} version of:", transforms)

    def auto_type_variants(self, base: TransformSet) -> Iterator[Variant]:
        for param in self.func.get_params(lambda param: param.has(ModifierKind.AUTO_TYPE)):
            auto_type = param.get(ModifierKind.AUTO_TYPE)
            buffer_param = self._param(auto_type.reference)
            typed_base = self._with_auto_size(base)

            remaining: list[BufferType] = list(auto_type.types)
            for buffer_type in auto_type.types:
                unsigned_type = buffer_type.unsigned
                if unsigned_type is None or unsigned_type not in remaining or buffer_type not in remaining:
                    continue

                transforms = self._with_byte_size(typed_base, buffer_param, buffer_type.mapping.byte_shift)
                transforms = (
                    transforms
                    .with_transform(param, AutoTypeParamWithSignTransform(unsigned_type.constant, buffer_type.constant))
                    .with_transform(buffer_param, AutoTypeTargetTransform(buffer_type.mapping))
                )
                yield Variant(self.stripped_name, f"{unsigned_type.name} / {buffer_type.name} version of:", transforms)

                remaining.remove(buffer_type)
                remaining.remove(unsigned_type)

            for buffer_type in remaining:
                transforms = self._with_byte_size(typed_base, buffer_param, buffer_type.mapping.byte_shift)
                transforms = (
                    transforms
                    .with_transform(param, AutoTypeParamTransform(buffer_type.constant))
                    .with_transform(buffer_param, AutoTypeTargetTransform(buffer_type.mapping))
                )
                yield Variant(self.stripped_name, f"{buffer_type.name} version of:", transforms)

    def pointer_array_variants(self, base: TransformSet) -> Iterator[Variant]:
        for param in self.func.get_params(lambda param: param.has(ModifierKind.POINTER_ARRAY)):
            pointer_array = param.get(ModifierKind.POINTER_ARRAY)
            count_param = self._param(pointer_array.count_param)

            transforms = base
            if pointer_array.lengths_param is not None:
                # Without lengths every element is null-terminated
                transforms = transforms.with_transform(self._param(pointer_array.lengths_param), ExpressionTransform("0L"))

            yield Variant(
                self.stripped_name, f"Single {param.name} version of:",
                transforms.with_transform(count_param, ExpressionTransform("1")).with_transform(param, POINTER_ARRAY_SINGLE))
            yield Variant(
                self.stripped_name, "Array version of:",
                transforms.with_transform(count_param, ExpressionTransform(f"{param.name}.length"))
                .with_transform(param, POINTER_ARRAY_MULTI))


def resolve_variants(func: NativeClassFunction) -> list[Variant]:
    """All alternative methods of ``func``, in emission order."""
    return VariantResolver(func).resolve()
