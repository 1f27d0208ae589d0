"""Builds native classes from declarative template files.

A template is a TOML or JSON document with a ``class`` table, optional
``types``, ``constants`` blocks and a list of ``functions``. It is checked
against the bundled JSON schema before anything is built.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator

from nativegen import logging as nativegen_logging
from nativegen import modifiers, utils
from nativegen.constants import Constant, ConstantBlock
from nativegen.data_types import ParameterType
from nativegen.errors import TemplateError
from nativegen.frontend.catalog import TypeCatalog
from nativegen.functions import (FunctionProvider, NativeClass, Parameter,
                                 ReturnValue)
from nativegen.native_types import BufferType, PointerMapping

logger = nativegen_logging.get_logger(__name__)

_SCHEMA_PATH = Path(__file__).with_name("schema.json")

_DIRECTIONS = {
    "in": ParameterType.IN,
    "out": ParameterType.OUT,
    "inout": ParameterType.INOUT,
}

_SIMPLE_MODIFIERS = {
    "const": modifiers.CONST,
    "nullable": modifiers.NULLABLE,
    "optional": modifiers.OPTIONAL,
    "nullTerminated": modifiers.NULL_TERMINATED,
    "returnValue": modifiers.RETURN_VALUE,
    "deprecated": modifiers.DEPRECATED,
}


@lru_cache(maxsize=None)
def load_schema() -> dict:
    with open(_SCHEMA_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def validate_document(document: Any, source: str = "<template>") -> None:
    """Raise TemplateError for the first schema violation in ``document``."""
    validator = Draft202012Validator(load_schema())
    errors = sorted(validator.iter_errors(document), key=lambda error: list(error.absolute_path))
    if errors:
        error = errors[0]
        raise TemplateError(f"{source}: {error.json_path}: {error.message}")


def read_document(path) -> dict:
    path = Path(path)
    match path.suffix:
        case ".toml":
            return utils.load_toml(path)
        case ".json":
            return json.loads(utils.read_file(str(path)))
        case _:
            raise TemplateError(f"{path}: unsupported template format '{path.suffix}'")


def _enum_values(enum_type, names, source: str):
    values = []
    for name in names:
        try:
            values.append(enum_type[name])
        except KeyError:
            raise TemplateError(f"{source}: unknown {enum_type.__name__} '{name}'") from None
    return tuple(values)


def parse_modifier(spec, catalog: TypeCatalog, source: str = "<template>") -> modifiers.TemplateModifier:
    if isinstance(spec, str):
        try:
            return _SIMPLE_MODIFIERS[spec]
        except KeyError:
            raise TemplateError(f"{source}: unknown modifier '{spec}'") from None

    match spec["kind"]:
        case "autoSize":
            return modifiers.AutoSize(
                spec["reference"],
                tuple(spec.get("dependent", ())),
                spec.get("expression"),
                spec.get("to_bytes", False),
            )
        case "autoType":
            return modifiers.AutoType(spec["reference"], _enum_values(BufferType, spec["types"], source))
        case "multiType":
            return modifiers.MultiType(_enum_values(PointerMapping, spec["types"], source))
        case "check":
            return modifiers.Check(str(spec["expression"]), spec.get("bytes", False), spec.get("debug", False))
        case "expression":
            return modifiers.Expression(spec["value"], spec.get("keep_param", False))
        case "return":
            return modifiers.Return(spec["length_param"], spec["max_length_param"], spec.get("max_length_expression"))
        case "singleValue":
            return modifiers.SingleValue(spec["new_name"])
        case "pointerArray":
            return modifiers.PointerArray(
                catalog.resolve(spec["element_type"]), spec["count_param"], spec.get("lengths_param"))
        case "bufferObject":
            return modifiers.BufferObject(spec["binding"])
        case "mapPointer":
            return modifiers.MapPointer(spec["size_expression"])
        case "callbackData":
            return modifiers.CallbackData(spec["reference"])
        case "sdkReference":
            return modifiers.SdkReference(spec["function"])
        case "dependsOn":
            return modifiers.DependsOn(spec["reference"])
        case kind:
            raise TemplateError(f"{source}: unknown modifier '{kind}'")


def _parse_modifiers(specs, catalog: TypeCatalog, source: str) -> list[modifiers.TemplateModifier]:
    return [parse_modifier(spec, catalog, source) for spec in specs or ()]


def _build_return(spec, catalog: TypeCatalog, source: str) -> ReturnValue:
    if spec is None:
        spec = "void"
    if isinstance(spec, str):
        return ReturnValue(catalog.resolve(spec))
    returns = ReturnValue(catalog.resolve(spec["type"]))
    if spec.get("modifiers"):
        returns.set_modifiers(*_parse_modifiers(spec["modifiers"], catalog, source))
    return returns


def _build_param(spec, catalog: TypeCatalog, source: str) -> Parameter:
    param = Parameter(
        catalog.resolve(spec["type"]),
        spec["name"],
        _DIRECTIONS[spec.get("direction", "in")],
        spec.get("documentation", ""),
        spec.get("links", ""),
    )
    if spec.get("modifiers"):
        param.set_modifiers(*_parse_modifiers(spec["modifiers"], catalog, source))
    return param


def build_native_class(document: dict, source: str = "<template>", catalog: Optional[TypeCatalog] = None) -> NativeClass:
    """Build a NativeClass from an already validated template document."""
    catalog = catalog or TypeCatalog.default()
    if document.get("types"):
        catalog = catalog.extended(document["types"])

    spec = document["class"]
    provider = spec.get("function_provider")
    native_class = NativeClass(
        package=spec["package"],
        class_name=spec["name"],
        template_name=spec.get("template", spec["name"]),
        prefix_method=spec.get("prefix_method", ""),
        prefix_constant=spec.get("prefix_constant", ""),
        postfix=spec.get("postfix", ""),
        function_provider=FunctionProvider(provider["name"], provider["address"]) if provider else None,
        documentation=spec.get("documentation", ""),
        native_imports=list(spec.get("native_imports", ())),
        reference_url=spec.get("reference_url"),
        deprecated_reference_url=spec.get("deprecated_reference_url"),
    )

    for block in document.get("constants", ()):
        native_class.constant_blocks.append(ConstantBlock(
            block.get("documentation", ""),
            tuple(Constant(name, value) for name, value in block["values"].items()),
            block.get("java_type", "int"),
        ))

    for function_spec in document.get("functions", ()):
        location = f"{source}: {function_spec['name']}"
        seen = set()
        for param_spec in function_spec.get("params", ()):
            if param_spec["name"] in seen:
                raise TemplateError(f"{location}: duplicate parameter '{param_spec['name']}'")
            seen.add(param_spec["name"])
        params = [_build_param(param, catalog, location) for param in function_spec.get("params", ())]
        func = native_class.func(
            _build_return(function_spec.get("returns"), catalog, location),
            function_spec["name"],
            function_spec.get("documentation", ""),
            *params,
        )
        if function_spec.get("modifiers"):
            func.set_modifiers(*_parse_modifiers(function_spec["modifiers"], catalog, location))

    logger.debug("Loaded %s with %d functions from %s",
                 native_class.class_name, len(native_class.functions), source)
    return native_class


def load_template(path, catalog: Optional[TypeCatalog] = None) -> NativeClass:
    document = read_document(path)
    validate_document(document, str(path))
    return build_native_class(document, str(path), catalog)
