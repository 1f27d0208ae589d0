import os

import pytest

from nativegen.constants import ConstantPool
from nativegen.errors import ValidationError
from nativegen.frontend import load_template
from nativegen.functions import param_in, param_out
from nativegen.generator import ClassGenerator, build_constant_pool, generate
from nativegen.modifiers import AutoSize
from tests.utils import GLsizei, GLuint_p, config, static_class, template_path


@pytest.fixture
def gl15():
    return load_template(template_path("GL15.toml"))


def test_java_source(gl15, config):
    source = ClassGenerator(gl15, config).java_source()

    assert source.startswith("/* MACHINE GENERATED FILE, DO NOT EDIT */\npackage org.lwjgl.opengl;\n")
    assert "import static org.lwjgl.system.MemoryUtil.*;\n" in source
    assert "public final class GL15 {\n" in source
    assert "\tpublic static final int\n\t\tGL_ARRAY_BUFFER = 0x8892,\n\t\tGL_ELEMENT_ARRAY_BUFFER = 0x8893;\n" in source
    assert "\t\tGL_DYNAMIC_DRAW = 0x88E8;\n" in source
    assert "\tprivate GL15() {}\n" in source
    assert "public static void glBufferData(int target, ShortBuffer data, int usage)" in source
    assert "public static int glGetBufferParameteri(int target, int pname)" in source
    assert source.endswith("\n}\n")


def test_native_source(gl15, config):
    source = ClassGenerator(gl15, config).native_source()

    assert source.startswith('/* MACHINE GENERATED FILE, DO NOT EDIT */\n#include "common_tools.h"\n#include "opengl.h"\n')
    assert "typedef void (APIENTRY *glBindBufferPROC) (GLenum, GLuint);\n" in source
    assert "typedef void (APIENTRY *glDeleteBuffersPROC) (GLsizei, const GLuint *);\n" in source
    assert "\nEXTERN_C_ENTER\n" in source
    assert source.endswith("\nEXTERN_C_EXIT\n")


def test_static_class_has_no_typedefs(config):
    native_class = load_template(template_path("AL10.json"))
    source = ClassGenerator(native_class, config).native_source()

    assert "typedef" not in source
    assert "\t\tAL_INVALID = -1,\n" in ClassGenerator(native_class, config).java_source()


def test_write(gl15, config, tmp_path):
    generator = ClassGenerator(gl15, config)
    java_path, native_path = generator.write(str(tmp_path))

    assert java_path == os.path.join(str(tmp_path), "java", "org", "lwjgl", "opengl", "GL15.java")
    assert native_path == os.path.join(str(tmp_path), "native", "GL15.c")
    with open(java_path) as f:
        first = f.read()
    assert first == generator.java_source()

    # A second run produces the same bytes
    generator.write(str(tmp_path))
    with open(java_path) as f:
        assert f.read() == first


def test_output_dirs_from_config(gl15, config, tmp_path):
    config["output"]["java_dir"] = "src/main/java"
    java_path, _ = ClassGenerator(gl15, config).output_paths(str(tmp_path))
    assert java_path == os.path.join(str(tmp_path), "src/main/java", "org", "lwjgl", "opengl", "GL15.java")


def test_unfrozen_pool(gl15):
    with pytest.raises(RuntimeError, match="must be frozen"):
        ClassGenerator(gl15, constants=ConstantPool())


def test_constants_link_across_classes(gl15):
    other = static_class(prefix_constant="AL_")
    pool = build_constant_pool([gl15, other])
    assert pool.link("ARRAY_BUFFER") == "{@link GL15#GL_ARRAY_BUFFER ARRAY_BUFFER}"


def test_generate_validates_everything_first(gl15, config, tmp_path):
    broken = static_class()
    broken.func(
        GLsizei, "Fill", "",
        param_in(GLsizei, "count", "").set_modifiers(AutoSize("missing")),
        param_out(GLuint_p, "buf", ""),
    )

    with pytest.raises(ValidationError, match="Buffer reference does not exist"):
        generate([gl15, broken], str(tmp_path), config)
    assert os.listdir(tmp_path) == []


def test_generate_rejects_unknown_links(gl15, config, tmp_path):
    other = static_class()
    other.func(
        GLsizei, "Bind", "",
        param_in(GLsizei, "target", "", "ARRAY_BUFFER NOT_A_CONSTANT"),
    )

    with pytest.raises(ValidationError, match=r"Unknown constant in links: NOT_A_CONSTANT \[Test.Bind, parameter: target\]"):
        generate([gl15, other], str(tmp_path), config)
    assert os.listdir(tmp_path) == []


def test_generate(gl15, config, tmp_path):
    written = generate([gl15, load_template(template_path("AL10.json"))], str(tmp_path), config)
    assert [os.path.basename(path) for path in written] == ["GL15.java", "GL15.c", "AL10.java", "AL10.c"]
