"""Overload naming helpers."""

from nativegen.native_types import PointerMapping

_TYPE_CHARS = {
    PointerMapping.DATA_SHORT: "s",
    PointerMapping.DATA_INT: "i",
    PointerMapping.DATA_LONG: "l",
    PointerMapping.DATA_FLOAT: "f",
    PointerMapping.DATA_DOUBLE: "d",
}


def strip_postfix(func, strip_type: bool = False) -> str:
    """Derive the overload name of ``func``.

    Only functions whose last parameter is a buffer are renamed: the native
    class postfix is removed, then a trailing ``v`` and, with ``strip_type``,
    the element type character before it (``glUniform4fv`` -> ``glUniform4``).
    The class postfix is appended back at the end.
    """
    if not func.parameters:
        return func.name

    param = list(func.parameters.values())[-1]
    if not param.is_buffer_pointer:
        return func.name

    postfix = func.native_class.postfix
    name = func.name
    if postfix and name.endswith(postfix):
        name = name[:-len(postfix)]

    cut_count = 1 if name.endswith("v") else 0

    if strip_type:
        type_char = _TYPE_CHARS.get(param.native_type.mapping)
        if type_char is not None and len(name) > cut_count and name[len(name) - cut_count - 1] == type_char:
            cut_count += 1

    return name[:len(name) - cut_count] + postfix


def jni_mangle(name: str) -> str:
    """Mangle a qualified Java name for use in a JNI symbol."""
    return name.replace("_", "_1").replace(".", "_")


def jni_function_name(func) -> str:
    prefix = "" if func.is_simple_function else "n"
    return f"Java_{func.native_class.native_file_name}_{jni_mangle(prefix + func.name)}"


def native_method_name(func) -> str:
    prefix = "" if func.is_simple_function else "n"
    return prefix + func.name
