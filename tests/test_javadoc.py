from nativegen.constants import Constant
from nativegen.functions import param_in
from nativegen.generator import build_constant_pool
from nativegen.javadoc import (class_javadoc, function_javadoc, javadoc_link,
                               link_comment)
from nativegen.modifiers import DEPRECATED, DependsOn, SdkReference
from nativegen.native_types import VOID
from tests.utils import GLenum, GLfloat_p, GLsizei, GLuint, dynamic_class


def test_function_javadoc_with_reference_and_links():
    native_class = dynamic_class(reference_url="http://docs.gl/{function}.xml")
    native_class.constants("Buffer targets.", Constant("ARRAY_BUFFER", 0x8892), Constant("ELEMENT_ARRAY_BUFFER", 0x8893))
    func = native_class.func(
        VOID, "BindBuffer", "Binds a named buffer object.",
        param_in(GLenum, "target", "the target", links="ARRAY_BUFFER ELEMENT_ARRAY_BUFFER"),
        param_in(GLuint, "buffer", "the buffer object name"),
    )

    assert function_javadoc(func, build_constant_pool([native_class])) == [
        "/**",
        ' * <a href="http://docs.gl/glBindBuffer.xml">Reference Page</a>',
        " * <p/>",
        " * Binds a named buffer object.",
        " *",
        " * @param target the target One of:<br>"
        "{@link GL15#GL_ARRAY_BUFFER ARRAY_BUFFER}, {@link GL15#GL_ELEMENT_ARRAY_BUFFER ELEMENT_ARRAY_BUFFER}",
        " * @param buffer the buffer object name",
        " */",
    ]


def test_reference_page_uses_the_typed_name():
    native_class = dynamic_class(reference_url="http://docs.gl/{function}.xml")
    func = native_class.func(
        VOID, "Uniform4fv", "",
        param_in(GLsizei, "count", ""),
        param_in(GLfloat_p, "value", ""),
    )
    assert '<a href="http://docs.gl/glUniform4.xml">Reference Page</a>' in function_javadoc(func)[1]

    func = native_class.func(VOID, "Flush", "")
    func.set_modifiers(SdkReference("glFinish"))
    assert function_javadoc(func) == [
        "/**",
        ' * <a href="http://docs.gl/glFinish.xml">Reference Page</a>',
        " * <p/>",
        " */",
    ]


def test_deprecated_function_links_the_legacy_reference():
    native_class = dynamic_class(
        reference_url="http://www.opengl.org/sdk/docs/man/xhtml/{function}.xml",
        deprecated_reference_url="http://www.opengl.org/sdk/docs/man2/xhtml/{function}.xml",
    )
    func = native_class.func(VOID, "Begin", "Begins a primitive.", param_in(GLenum, "mode", "the primitive"))
    func.set_modifiers(DEPRECATED)

    assert function_javadoc(func)[:4] == [
        "/**",
        ' * <a href="http://www.opengl.org/sdk/docs/man2/xhtml/glBegin.xml">Reference Page</a> '
        "<em>- This function is deprecated and unavailable in the Core profile -</em>",
        " * <p/>",
        " * Begins a primitive.",
    ]


def test_deprecated_function_without_reference_url():
    func = dynamic_class().func(VOID, "End", "")
    func.set_modifiers(DEPRECATED)
    assert function_javadoc(func) == [
        "/**",
        " * <em>- This function is deprecated and unavailable in the Core profile -</em>",
        " * <p/>",
        " */",
    ]


def test_depends_on_is_documented():
    func = dynamic_class().func(VOID, "ColorTable", "Defines a color lookup table.")
    func.set_modifiers(DependsOn("GL_ARB_imaging"))
    assert function_javadoc(func) == [
        "/**",
        " * Defines a color lookup table.",
        " * <p>Requires {@code GL_ARB_imaging}.</p>",
        " */",
    ]


def test_link_comment():
    func = dynamic_class().func(
        VOID, "Uniform4fv", "",
        param_in(GLsizei, "count", ""),
        param_in(GLfloat_p, "value", ""),
    )
    assert javadoc_link(func) == "{@link #glUniform4f(int, ByteBuffer)}"
    assert link_comment("Alternative version of:", func) == [
        "/** Alternative version of: {@link #glUniform4f(int, ByteBuffer)} */"]


def test_class_javadoc():
    assert class_javadoc("") == []
    assert class_javadoc("One line.") == ["/** One line. */"]
    assert class_javadoc("First line.\n    Second line.\n") == ["/**", " * First line.", " * Second line.", " */"]
