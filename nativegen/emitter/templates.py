from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_TEMPLATE_DIR = Path(__file__).with_name("templates")


@lru_cache(maxsize=None)
def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(_TEMPLATE_DIR),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def _normalize_lines(lines: Iterable[str]) -> tuple[str, ...]:
    normalized: list[str] = []
    for entry in lines:
        if entry is None:
            continue
        parts = str(entry).splitlines()
        if not parts:
            normalized.append("")
            continue
        normalized.extend(parts)
    return tuple(normalized)


@dataclass(frozen=True)
class MethodContext:
    """Template inputs for a Java method with a body."""

    javadoc: tuple[str, ...]
    return_type: str
    name: str
    params: tuple[str, ...]
    body: tuple[str, ...]

    @classmethod
    def create(
        cls,
        *,
        javadoc: Iterable[str],
        return_type: str,
        name: str,
        params: Iterable[Optional[str]],
        body: Iterable[str],
    ) -> "MethodContext":
        return cls(
            javadoc=_normalize_lines(javadoc),
            return_type=return_type,
            name=name,
            params=tuple(param for param in params if param is not None),
            body=_normalize_lines(body),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "javadoc": self.javadoc,
            "return_type": self.return_type,
            "name": self.name,
            "params": self.params,
            "body": self.body,
        }


@dataclass(frozen=True)
class NativeMethodContext:
    javadoc: tuple[str, ...]
    return_type: str
    name: str
    params: tuple[str, ...]

    @classmethod
    def create(cls, *, javadoc: Iterable[str], return_type: str, name: str, params: Iterable[str]) -> "NativeMethodContext":
        return cls(
            javadoc=_normalize_lines(javadoc),
            return_type=return_type,
            name=name,
            params=tuple(params),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "javadoc": self.javadoc,
            "return_type": self.return_type,
            "name": self.name,
            "params": self.params,
        }


@dataclass(frozen=True)
class JNIFunctionContext:
    """Template inputs for a JNI glue function."""

    return_type: str
    name: str
    params: tuple[str, ...]
    body: tuple[str, ...]

    @classmethod
    def create(cls, *, return_type: str, name: str, params: Iterable[str], body: Iterable[str]) -> "JNIFunctionContext":
        return cls(
            return_type=return_type,
            name=name,
            params=tuple(params),
            body=_normalize_lines(body),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "return_type": self.return_type,
            "name": self.name,
            "params": self.params,
            "body": self.body,
        }


@dataclass(frozen=True)
class ConstantBlockContext:
    javadoc: tuple[str, ...]
    java_type: str
    constants: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class JavaClassContext:
    """Template inputs for a complete Java source file."""

    header: str
    package: str
    imports: tuple[str, ...]
    javadoc: tuple[str, ...]
    class_name: str
    constant_blocks: tuple[ConstantBlockContext, ...]
    members: tuple[str, ...]

    @classmethod
    def create(
        cls,
        *,
        header: str,
        package: str,
        imports: Iterable[str],
        javadoc: Iterable[str],
        class_name: str,
        constant_blocks: Iterable[ConstantBlockContext],
        members: Iterable[str],
    ) -> "JavaClassContext":
        return cls(
            header=header,
            package=package,
            imports=tuple(imports),
            javadoc=_normalize_lines(javadoc),
            class_name=class_name,
            constant_blocks=tuple(constant_blocks),
            members=tuple(member.rstrip("\n") for member in members),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "header": self.header,
            "package": self.package,
            "imports": self.imports,
            "javadoc": self.javadoc,
            "class_name": self.class_name,
            "constant_blocks": self.constant_blocks,
            "members": self.members,
        }


@dataclass(frozen=True)
class NativeSourceContext:
    """Template inputs for a complete C glue file."""

    header: str
    includes: tuple[str, ...]
    typedefs: tuple[str, ...]
    functions: tuple[str, ...]

    @classmethod
    def create(cls, *, header: str, includes: Iterable[str], typedefs: Iterable[str], functions: Iterable[str]) -> "NativeSourceContext":
        return cls(
            header=header,
            includes=tuple(includes),
            typedefs=tuple(typedefs),
            functions=tuple(function.rstrip("\n") for function in functions),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "header": self.header,
            "includes": self.includes,
            "typedefs": self.typedefs,
            "functions": self.functions,
        }


def _render(template_name: str, args: dict[str, Any]) -> str:
    return _get_env().get_template(template_name).render(args)


def render_method(context: MethodContext) -> str:
    return _render("method.j2", context.as_template_args())


def render_native_method(context: NativeMethodContext) -> str:
    return _render("native_method.j2", context.as_template_args())


def render_jni_function(context: JNIFunctionContext) -> str:
    return _render("jni_function.j2", context.as_template_args())


def render_java_class(context: JavaClassContext) -> str:
    return _render("java_class.j2", context.as_template_args())


def render_native_source(context: NativeSourceContext) -> str:
    return _render("native_source.j2", context.as_template_args())
