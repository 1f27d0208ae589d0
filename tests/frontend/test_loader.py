import json

import pytest

from nativegen.errors import ModifierError, TemplateError
from nativegen.frontend import TypeCatalog, load_template, parse_modifier
from nativegen.frontend.loader import build_native_class, validate_document
from nativegen.modifiers import (DEPRECATED, NULLABLE, RETURN_VALUE, AutoSize,
                                 AutoType, DependsOn, ModifierKind, MultiType,
                                 PointerArray)
from nativegen.native_types import (BufferType, CharSequenceType,
                                    PointerMapping, PrimitiveMapping)
from tests.utils import template_path


@pytest.fixture
def catalog():
    return TypeCatalog.default()


def test_load_toml_template():
    native_class = load_template(template_path("GL15.toml"))

    assert native_class.package == "org.lwjgl.opengl"
    assert native_class.class_name == "GL15"
    assert native_class.function_provider.address == "GL.getCapabilities().{function}"
    assert native_class.native_imports == ["opengl.h"]
    assert [func.name for func in native_class.functions] == [
        "glBindBuffer", "glDeleteBuffers", "glBufferData", "glGetBufferParameteriv", "glMapBuffer"]

    assert [block.names for block in native_class.constant_blocks] == [
        ["ARRAY_BUFFER", "ELEMENT_ARRAY_BUFFER"],
        ["STREAM_DRAW", "STATIC_DRAW", "DYNAMIC_DRAW"],
    ]
    assert native_class.constant_blocks[0].constants[0].value == 0x8892

    buffer_data = native_class.functions[2]
    size = buffer_data.parameters["size"]
    assert size.native_type.mapping == PrimitiveMapping.POINTER
    assert size.get(ModifierKind.AUTO_SIZE) == AutoSize("data", to_bytes=True)
    data = buffer_data.parameters["data"]
    assert data.has(ModifierKind.CONST)
    assert data.is_nullable
    assert data.get(ModifierKind.MULTI_TYPE).types[2] == PointerMapping.DATA_INT
    assert buffer_data.parameters["usage"].links == "STREAM_DRAW STATIC_DRAW DYNAMIC_DRAW"

    get_param = native_class.functions[3]
    params = get_param.parameters["params"]
    assert params.has(RETURN_VALUE)
    assert params.get(ModifierKind.CHECK).expression == "1"

    map_buffer = native_class.functions[4]
    assert map_buffer.returns.get(ModifierKind.MAP_POINTER).size_expression == \
        "glGetBufferParameteri(target, GL_BUFFER_SIZE)"


def test_load_json_template():
    native_class = load_template(template_path("AL10.json"))

    assert native_class.function_provider is None
    assert native_class.functions[0].is_simple_function
    assert isinstance(native_class.functions[1].returns.native_type, CharSequenceType)
    assert native_class.constant_blocks[0].constants[0].value == -1


def test_template_types_extend_the_catalog(catalog):
    document = {
        "class": {"package": "org.lwjgl.test", "name": "Test"},
        "types": {
            "cl_mem": {"kind": "pointer", "mapping": "NAKED_POINTER"},
            "GLint": {"kind": "primitive", "mapping": "LONG"},
        },
        "functions": [
            {"name": "Release", "params": [{"type": "cl_mem", "name": "memobj"}]},
            {"name": "Get", "params": [{"type": "GLint", "name": "value"}]},
        ],
    }
    validate_document(document)
    native_class = build_native_class(document, catalog=catalog)

    assert native_class.functions[0].parameters["memobj"].native_type.mapping == PointerMapping.NAKED_POINTER
    assert native_class.functions[1].parameters["value"].native_type.mapping == PrimitiveMapping.LONG
    # The shared catalog is not modified
    assert catalog.resolve("GLint").mapping == PrimitiveMapping.INT
    assert "cl_mem" not in catalog


def test_unknown_type(catalog):
    with pytest.raises(TemplateError, match="Unknown native type 'GLhalf'"):
        catalog.resolve("GLhalf")


def test_schema_errors_name_the_location():
    with pytest.raises(TemplateError, match=r"Test.toml: \$.class.package"):
        validate_document({"class": {"package": "Org.Lwjgl", "name": "Test"}}, "Test.toml")

    with pytest.raises(TemplateError, match=r"\$.functions\[0\].params\[0\].modifiers\[0\]"):
        validate_document({
            "class": {"package": "org.lwjgl", "name": "Test"},
            "functions": [{"name": "Foo", "params": [
                {"type": "GLint *", "name": "buf", "modifiers": [{"kind": "autoSize"}]},
            ]}],
        })


def test_unsupported_extension(tmp_path):
    path = tmp_path / "GL15.yaml"
    path.write_text("class: {}")
    with pytest.raises(TemplateError, match="unsupported template format '.yaml'"):
        load_template(path)


def test_parse_modifier(catalog):
    assert parse_modifier("nullable", catalog) is NULLABLE
    assert parse_modifier("deprecated", catalog) is DEPRECATED
    assert parse_modifier({"kind": "dependsOn", "reference": "GL_ARB_imaging"}, catalog) == DependsOn("GL_ARB_imaging")
    assert parse_modifier({"kind": "autoSize", "reference": "buf", "dependent": ["other"]}, catalog) == \
        AutoSize("buf", ("other",))
    assert parse_modifier({"kind": "autoType", "reference": "indices", "types": ["GL_UNSIGNED_INT"]}, catalog) == \
        AutoType("indices", (BufferType.GL_UNSIGNED_INT,))
    assert parse_modifier({"kind": "multiType", "types": ["DATA_FLOAT"]}, catalog) == \
        MultiType((PointerMapping.DATA_FLOAT,))

    pointer_array = parse_modifier(
        {"kind": "pointerArray", "element_type": "GLchar *", "count_param": "count", "lengths_param": "length"}, catalog)
    assert isinstance(pointer_array, PointerArray)
    assert isinstance(pointer_array.element_type, CharSequenceType)

    with pytest.raises(TemplateError, match="unknown modifier 'volatile'"):
        parse_modifier("volatile", catalog)
    with pytest.raises(TemplateError, match="unknown PointerMapping 'DATA_HALF'"):
        parse_modifier({"kind": "multiType", "types": ["DATA_HALF"]}, catalog)


def test_modifier_errors_propagate(tmp_path):
    document = {
        "class": {"package": "org.lwjgl.test", "name": "Test"},
        "functions": [{"name": "Foo", "params": [
            {"type": "GLint", "name": "value", "modifiers": ["nullable"]},
        ]}],
    }
    path = tmp_path / "Test.json"
    path.write_text(json.dumps(document))
    with pytest.raises(ModifierError, match="must be a pointer type"):
        load_template(path)


def test_duplicate_parameter_names():
    document = {
        "class": {"package": "org.lwjgl.test", "name": "Test"},
        "functions": [{"name": "glBindBuffer", "params": [
            {"type": "GLenum", "name": "target"},
            {"type": "GLuint", "name": "target"},
        ]}],
    }
    with pytest.raises(TemplateError, match="Test.json: glBindBuffer: duplicate parameter 'target'"):
        build_native_class(document, "Test.json")
