from typing import Optional

from nativegen import logging as nativegen_logging
from nativegen.constants import ConstantPool
from nativegen.data_types import GenerationMode
from nativegen.emitter.checks import generate_checks, render_checks
from nativegen.emitter.options import DEFAULT_OPTIONS, EmitterOptions
from nativegen.emitter.templates import (MethodContext, NativeMethodContext,
                                         render_method, render_native_method)
from nativegen.errors import ResolutionError
from nativegen.functions import FUNCTION_ADDRESS, RESULT, NativeClassFunction
from nativegen.javadoc import function_javadoc, link_comment
from nativegen.modifiers import ModifierKind
from nativegen.naming import native_method_name, strip_postfix
from nativegen.native_types import CharSequenceType
from nativegen.resolver import Variant, resolve_variants
from nativegen.transforms import (API_BUFFER, APIBufferFunctionTransform,
                                  MapPointerTransform, PreFunctionTransform,
                                  StringReturnTransform, TransformSet)

logger = nativegen_logging.get_logger(__name__)


class JavaEmitter:
    """Renders the Java members of one native function."""

    def __init__(
        self,
        func: NativeClassFunction,
        options: EmitterOptions = DEFAULT_OPTIONS,
        constants: Optional[ConstantPool] = None,
    ):
        self.func = func
        self.options = options
        self.constants = constants

    @property
    def _provider(self):
        return self.func.native_class.function_provider

    def _address_lines(self) -> list[str]:
        if self._provider is None:
            return []
        return [self._provider.function_address(self.func)]

    def _native_call(self, transforms: Optional[TransformSet] = None) -> str:
        transforms = transforms or TransformSet()
        args = [transforms.call_or_else(param, param.native_call_param) for param in self.func.parameters.values()]
        if self._provider is not None:
            args.append(FUNCTION_ADDRESS)
        return f"n{self.func.name}({', '.join(args)})"

    def native_method(self) -> str:
        func = self.func
        simple = func.is_simple_function
        if simple:
            javadoc = function_javadoc(func, self.constants)
        else:
            javadoc = link_comment("JNI method for", func)

        params = [param.as_native_method_param for param in func.parameters.values()]
        if self._provider is not None:
            params.append(f"long {FUNCTION_ADDRESS}")

        return render_native_method(NativeMethodContext.create(
            javadoc=javadoc,
            return_type=func.returns.native_method_type,
            name=native_method_name(func),
            params=params,
        ))

    def java_method(self) -> str:
        """The baseline method: every buffer is taken as a ByteBuffer."""
        func = self.func
        returns = func.returns

        params = []
        for param in func.parameters.values():
            if param.has(ModifierKind.CALLBACK_DATA):
                continue
            params.append(f"ByteBuffer {param.name}" if param.is_buffer_pointer else param.as_java_method_param)

        body = self._address_lines()
        body.extend(render_checks(generate_checks(func, GenerationMode.NORMAL, options=self.options), self.options))

        call = self._native_call()
        if returns.is_void:
            body.append(f"{call};")
        elif returns.is_buffer_pointer:
            if not returns.has(ModifierKind.MAP_POINTER):
                raise ResolutionError(f"The buffer return value of {func.describe()} has no size.")
            body.append(f"long {RESULT} = {call};")
            body.append(f"return memByteBuffer({RESULT}, {returns.get(ModifierKind.MAP_POINTER).size_expression});")
        else:
            body.append(f"return {call};")

        return render_method(MethodContext.create(
            javadoc=function_javadoc(func, self.constants),
            return_type=returns.java_method_type,
            name=strip_postfix(func),
            params=params,
            body=body,
        ))

    def alternative_method(self, variant: Variant) -> str:
        func = self.func
        returns = func.returns
        transforms = variant.transforms
        return_transform = transforms.get(returns)

        # The baseline method is skipped for string returns, so this one carries the docs
        if isinstance(return_transform, StringReturnTransform):
            javadoc = function_javadoc(func, self.constants)
        else:
            javadoc = link_comment(variant.description, func)

        params = [
            transforms.declaration_or_else(param, param.as_java_method_param)
            for param in func.parameters.values()
            if not param.has(ModifierKind.CALLBACK_DATA)
        ]
        if isinstance(return_transform, MapPointerTransform):
            params.extend(return_transform.extra_params)

        body = self._address_lines()
        body.extend(render_checks(generate_checks(func, GenerationMode.ALTERNATIVE, transforms, self.options), self.options))

        for qtype, transform in transforms.items():
            if isinstance(transform, PreFunctionTransform):
                body.extend(transform.preprocess(qtype))

        api_buffer_set = False
        for qtype, transform in transforms.items():
            if isinstance(transform, APIBufferFunctionTransform):
                if not api_buffer_set:
                    body.append(f"{self.options.api_buffer_type} {API_BUFFER} = {self.options.api_buffer_factory};")
                    api_buffer_set = True
                body.extend(transform.setup_api_buffer(qtype))

        call = self._native_call(transforms)
        if returns.is_void:
            body.append(f"{call};")
            result = transforms.call_or_else(returns, "")
            if result:
                body.append(result)
        elif returns.is_buffer_pointer:
            body.append(f"long {RESULT} = {call};")
            buffer = "memByteBuffer"
            if isinstance(returns.native_type, CharSequenceType) and returns.native_type.null_terminated:
                buffer += f"NT{returns.native_type.char_mapping.bytes}"
            result = transforms.call_or_else(returns, f"{buffer}({RESULT})")
            # Multi-statement results carry their own return statement
            body.append(result if "\n" in result else f"return {result};")
        else:
            body.append(f"return {call};")

        return render_method(MethodContext.create(
            javadoc=javadoc,
            return_type=transforms.declaration_or_else(returns, returns.java_method_type),
            name=variant.name,
            params=params,
            body=body,
        ))

    def methods(self) -> list[str]:
        """All Java members of the function, in emission order."""
        func = self.func
        members = [self.native_method()]
        if func.is_simple_function:
            return members

        # A String return changes the return type, so there is no raw method to overload
        if not isinstance(func.returns.native_type, CharSequenceType):
            members.append(self.java_method())

        for variant in resolve_variants(func):
            logger.debug("Emitting %s: %s", variant.name, variant.description)
            members.append(self.alternative_method(variant))
        return members
