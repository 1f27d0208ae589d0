from jsonschema import Draft202012Validator

from nativegen import utils
from nativegen.frontend.catalog import TypeCatalog, build_type
from nativegen.frontend.loader import load_schema
from nativegen.native_types import (CallbackType, CharMapping,
                                    CharSequenceType, PointerMapping,
                                    StructType)


def test_schema_is_valid():
    Draft202012Validator.check_schema(load_schema())


def test_default_catalog_entries_are_valid():
    validator = Draft202012Validator({"$ref": "#/$defs/TypeDefinition", "$defs": load_schema()["$defs"]})
    definitions = utils.load_resource_toml("types.default.toml")
    for name, definition in definitions.items():
        assert not list(validator.iter_errors(definition)), name

    catalog = TypeCatalog(definitions)
    assert "GLvoid *" in catalog
    assert catalog.resolve("GLchar **").mapping == PointerMapping.DATA_POINTER


def test_build_type():
    text = build_type("GLwchar *", {"kind": "charseq", "charset": "UTF16", "null_terminated": False})
    assert isinstance(text, CharSequenceType)
    assert text.char_mapping == CharMapping.UTF16
    assert text.mapping == PointerMapping.DATA_SHORT
    assert not text.null_terminated

    info = build_type("GLsyncInfo *", {"kind": "struct", "definition": "SyncInfo"})
    assert isinstance(info, StructType)
    assert info.definition == "SyncInfo"

    proc = build_type("GLDEBUGPROC", {"kind": "callback", "definition": "DebugCallback"})
    assert isinstance(proc, CallbackType)
    assert proc.java_method_type == "DebugCallback"
    assert proc.mapping == PointerMapping.NAKED_POINTER
