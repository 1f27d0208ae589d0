import os
from typing import Any, Iterable, Optional

from nativegen import logging as nativegen_logging
from nativegen import utils
from nativegen.constants import ConstantPool
from nativegen.emitter import EmitterOptions, JavaEmitter, function_typedef, jni_function
from nativegen.emitter.templates import (ConstantBlockContext,
                                         JavaClassContext,
                                         NativeSourceContext,
                                         render_java_class,
                                         render_native_source)
from nativegen.functions import NativeClass
from nativegen.javadoc import class_javadoc
from nativegen.validator import validate_class, validate_links

logger = nativegen_logging.get_logger(__name__)


def _literal(constant, java_type: str) -> str:
    if java_type == "long" and isinstance(constant.value, int):
        return f"{constant.rendered_value}L"
    return constant.rendered_value


def build_constant_pool(native_classes: Iterable[NativeClass]) -> ConstantPool:
    """Register the constants of every class, then freeze the pool."""
    pool = ConstantPool()
    for native_class in native_classes:
        pool.register_class(native_class)
    return pool.freeze()


class ClassGenerator:
    """Renders the Java class and the C glue file of one native class."""

    def __init__(
        self,
        native_class: NativeClass,
        config: Optional[dict[str, Any]] = None,
        constants: Optional[ConstantPool] = None,
    ):
        self.native_class = native_class
        self.config = config or {}
        self.options = EmitterOptions.from_config(self.config)
        self.constants = constants if constants is not None else build_constant_pool([native_class])
        if not self.constants.frozen:
            raise RuntimeError("The constant pool must be frozen before generation")

    def java_source(self) -> str:
        native_class = self.native_class
        members = []
        with nativegen_logging.generation_target(native_class.class_name):
            for func in native_class.functions:
                with nativegen_logging.generation_target(func.name):
                    members.extend(JavaEmitter(func, self.options, self.constants).methods())

        blocks = [
            ConstantBlockContext(
                javadoc=tuple(class_javadoc(block.documentation)),
                java_type=block.java_type,
                constants=tuple(
                    (f"{native_class.prefix_constant}{constant.name}", _literal(constant, block.java_type))
                    for constant in block.constants),
            )
            for block in native_class.constant_blocks
        ]

        return render_java_class(JavaClassContext.create(
            header=self.options.file_header,
            package=native_class.package,
            imports=self.options.java_imports,
            javadoc=class_javadoc(native_class.documentation),
            class_name=native_class.class_name,
            constant_blocks=blocks,
            members=members,
        ))

    def native_source(self) -> str:
        native_class = self.native_class
        typedefs = []
        if native_class.function_provider is not None:
            typedefs = [function_typedef(func) for func in native_class.functions]

        return render_native_source(NativeSourceContext.create(
            header=self.options.file_header,
            includes=[*self.options.native_includes, *native_class.native_imports],
            typedefs=typedefs,
            functions=[jni_function(func) for func in native_class.functions],
        ))

    def output_paths(self, output_dir: str) -> tuple[str, str]:
        output_cfg = self.config.get("output", {})
        java_dir = os.path.join(output_dir, output_cfg.get("java_dir", "java"), *self.native_class.package.split("."))
        native_dir = os.path.join(output_dir, output_cfg.get("native_dir", "native"))
        return (
            os.path.join(java_dir, f"{self.native_class.class_name}.java"),
            os.path.join(native_dir, f"{self.native_class.class_name}.c"),
        )

    def write(self, output_dir: str) -> tuple[str, str]:
        # Render both files before writing either, so a failing class leaves nothing behind
        java_source = self.java_source()
        native_source = self.native_source()

        java_path, native_path = self.output_paths(output_dir)
        for path, source in ((java_path, java_source), (native_path, native_source)):
            if not utils.save_code(path, source):
                logger.debug("%s is up to date", path)
        logger.info("Generated %s (%d functions) into %s",
                    self.native_class.class_name, len(self.native_class.functions), output_dir)
        return java_path, native_path


def generate(native_classes: list[NativeClass], output_dir: str, config: Optional[dict[str, Any]] = None) -> list[str]:
    """Validate and generate every class, in the given order."""
    for native_class in native_classes:
        validate_class(native_class)

    constants = build_constant_pool(native_classes)
    for native_class in native_classes:
        validate_links(native_class, constants)

    written = []
    for native_class in native_classes:
        written.extend(ClassGenerator(native_class, config, constants).write(output_dir))
    return written
