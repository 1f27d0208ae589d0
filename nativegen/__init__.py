from nativegen.errors import (ModifierError, ResolutionError, TemplateError,
                              ValidationError)
from nativegen.functions import (FunctionProvider, NativeClass,
                                 NativeClassFunction, Parameter, ReturnValue,
                                 param_in, param_inout, param_out,
                                 return_value)
from nativegen.generator import ClassGenerator, generate
from nativegen.resolver import Variant, resolve_variants
from nativegen.validator import validate_class, validate_function

__all__ = [
    "ClassGenerator",
    "FunctionProvider",
    "ModifierError",
    "NativeClass",
    "NativeClassFunction",
    "Parameter",
    "ResolutionError",
    "ReturnValue",
    "TemplateError",
    "ValidationError",
    "Variant",
    "generate",
    "param_in",
    "param_inout",
    "param_out",
    "resolve_variants",
    "return_value",
    "validate_class",
    "validate_function",
]
