"""Javadoc assembly for generated methods."""

from typing import Optional

from nativegen.constants import ConstantPool
from nativegen.functions import NativeClassFunction
from nativegen.modifiers import ModifierKind
from nativegen.naming import strip_postfix


def javadoc_link(func: NativeClassFunction) -> str:
    """``{@link #name(types)}`` pointing at the baseline method of ``func``."""
    types = []
    for param in func.parameters.values():
        if param.has(ModifierKind.CALLBACK_DATA):
            continue
        types.append("ByteBuffer" if param.is_buffer_pointer else param.java_method_type)
    return f"{{@link #{strip_postfix(func)}({', '.join(types)})}}"


def link_comment(description: str, func: NativeClassFunction) -> list[str]:
    return [f"/** {description} {javadoc_link(func)} */"]


DEPRECATED_NOTICE = "<em>- This function is deprecated and unavailable in the Core profile -</em>"


def reference_link(func: NativeClassFunction) -> Optional[str]:
    """The SDK reference page link of ``func``, followed by the deprecation notice if it has one."""
    native_class = func.native_class
    deprecated = func.has(ModifierKind.DEPRECATED)
    url = native_class.reference_url
    if deprecated and native_class.deprecated_reference_url:
        url = native_class.deprecated_reference_url
    if not url:
        return DEPRECATED_NOTICE if deprecated else None
    if func.has(ModifierKind.SDK_REFERENCE):
        name = func.get(ModifierKind.SDK_REFERENCE).function
    else:
        name = strip_postfix(func, strip_type=True)
    link = f'<a href="{url.format(function=name)}">Reference Page</a>'
    return f"{link} {DEPRECATED_NOTICE}" if deprecated else link


def _param_doc(param, constants: Optional[ConstantPool]) -> str:
    text = f"@param {param.name} {param.documentation}".rstrip()
    if param.links and constants is not None:
        text += f" One of:<br>{', '.join(constants.links(param.links))}"
    return text


def function_javadoc(func: NativeClassFunction, constants: Optional[ConstantPool] = None) -> list[str]:
    """The full comment block of a method: reference link, text and parameters."""
    body: list[str] = []

    link = reference_link(func)
    if link:
        body.extend([link, "<p/>"])

    body.extend(line.strip() for line in func.documentation.strip().splitlines())
    if func.has(ModifierKind.DEPENDS_ON):
        body.append(f"<p>Requires {{@code {func.get(ModifierKind.DEPENDS_ON).reference}}}.</p>")

    params = [param for param in func.parameters.values() if not param.has(ModifierKind.CALLBACK_DATA)]
    if params:
        body.append("")
        body.extend(_param_doc(param, constants) for param in params)

    return ["/**", *(f" * {line}".rstrip() for line in body), " */"]


def class_javadoc(documentation: str) -> list[str]:
    lines = [line.strip() for line in documentation.strip().splitlines()]
    if not lines:
        return []
    if len(lines) == 1:
        return [f"/** {lines[0]} */"]
    return ["/**", *(f" * {line}".rstrip() for line in lines), " */"]
