"""JNI glue: one C entry point per native function."""

from nativegen.emitter.templates import JNIFunctionContext, render_jni_function
from nativegen.functions import (FUNCTION_ADDRESS, POINTER_POSTFIX,
                                 NativeClassFunction)
from nativegen.naming import jni_function_name


def function_typedef(func: NativeClassFunction) -> str:
    """The function pointer type used to call a dynamically resolved function."""
    params = ", ".join(param.to_native_type for param in func.parameters.values())
    return f"typedef {func.returns.to_native_type} (APIENTRY *{func.name}PROC) ({params});"


def jni_function(func: NativeClassFunction) -> str:
    provider = func.native_class.function_provider
    returns = func.returns

    params = [param.as_jni_function_param for param in func.parameters.values()]
    if provider is not None:
        params.append(f"jlong {FUNCTION_ADDRESS}")

    body = []
    for param in func.parameters.values():
        if not param.native_type.is_pointer:
            continue
        pointer_type = param.to_native_type
        ws = "" if pointer_type.endswith("*") else " "
        body.append(f"{pointer_type}{ws}{param.name} = ({pointer_type})(intptr_t){param.name}{POINTER_POSTFIX};")

    if provider is not None:
        body.append(f"{func.name}PROC {func.name} = ({func.name}PROC)(intptr_t){FUNCTION_ADDRESS};")

    call = f"{func.name}({', '.join(func.parameters)});"
    if returns.is_void:
        body.append(call)
    else:
        cast = f"({returns.jni_function_type})"
        if returns.native_type.is_pointer:
            cast += "(intptr_t)"
        body.append(f"return {cast}{call}")

    return render_jni_function(JNIFunctionContext.create(
        return_type=returns.jni_function_type,
        name=jni_function_name(func),
        params=params,
        body=body,
    ))
