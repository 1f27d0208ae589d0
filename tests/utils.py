import os

import pytest

from nativegen.functions import FunctionProvider, NativeClass
from nativegen.native_types import (PointerMapping, PrimitiveMapping, charseq,
                                    pointer, primitive)
from nativegen.utils import load_default_config

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "frontend", "templates")

GLenum = primitive("GLenum", PrimitiveMapping.INT)
GLint = primitive("GLint", PrimitiveMapping.INT)
GLuint = primitive("GLuint", PrimitiveMapping.INT)
GLsizei = primitive("GLsizei", PrimitiveMapping.INT)
GLbitfield = primitive("GLbitfield", PrimitiveMapping.INT)
GLint64 = primitive("GLint64", PrimitiveMapping.LONG)
GLfloat = primitive("GLfloat", PrimitiveMapping.FLOAT)
GLsizeiptr = primitive("GLsizeiptr", PrimitiveMapping.POINTER)

GLvoid_p = pointer("GLvoid *", PointerMapping.DATA)
GLint_p = pointer("GLint *", PointerMapping.DATA_INT)
GLuint_p = pointer("GLuint *", PointerMapping.DATA_INT)
GLsizei_p = pointer("GLsizei *", PointerMapping.DATA_INT)
GLfloat_p = pointer("GLfloat *", PointerMapping.DATA_FLOAT)
GLchar_pp = pointer("GLchar **", PointerMapping.DATA_POINTER)
GLsync = pointer("GLsync", PointerMapping.NAKED_POINTER)
GLchar_p = charseq("GLchar *")


def template_path(name):
    return os.path.join(TEMPLATE_DIR, name)


def static_class(**kwargs):
    """A statically linked class; functions without buffers are simple."""
    return NativeClass("org.lwjgl.test", "Test", **kwargs)


def dynamic_class(**kwargs):
    kwargs.setdefault("prefix_method", "gl")
    kwargs.setdefault("prefix_constant", "GL_")
    return NativeClass(
        "org.lwjgl.opengl",
        "GL15",
        function_provider=FunctionProvider("GL", "GL.getCapabilities().{function}"),
        **kwargs,
    )


@pytest.fixture
def config():
    return load_default_config()
