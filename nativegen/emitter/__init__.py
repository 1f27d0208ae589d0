from nativegen.emitter.java_emitter import JavaEmitter
from nativegen.emitter.jni_emitter import function_typedef, jni_function
from nativegen.emitter.options import DEFAULT_OPTIONS, EmitterOptions

__all__ = [
    "DEFAULT_OPTIONS",
    "EmitterOptions",
    "JavaEmitter",
    "function_typedef",
    "jni_function",
]
