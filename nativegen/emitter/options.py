from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class EmitterOptions:
    """Names the emitted code uses for its runtime support library."""

    checks_flag: str = "LWJGLUtil.CHECKS"
    debug_flag: str = "LWJGLUtil.DEBUG"
    buffer_object_check: str = "GLChecks.ensureBufferObject"
    api_buffer_type: str = "APIBuffer"
    api_buffer_factory: str = "apiBuffer()"
    java_imports: tuple[str, ...] = ()
    native_includes: tuple[str, ...] = ()
    file_header: str = "MACHINE GENERATED FILE, DO NOT EDIT"

    @classmethod
    def from_config(cls, config: Optional[dict[str, Any]]) -> "EmitterOptions":
        generator = (config or {}).get("generator", {})
        defaults = cls()
        return cls(
            checks_flag=generator.get("checks_flag", defaults.checks_flag),
            debug_flag=generator.get("debug_flag", defaults.debug_flag),
            buffer_object_check=generator.get("buffer_object_check", defaults.buffer_object_check),
            api_buffer_type=generator.get("api_buffer_type", defaults.api_buffer_type),
            api_buffer_factory=generator.get("api_buffer_factory", defaults.api_buffer_factory),
            java_imports=tuple(generator.get("java_imports", ())),
            native_includes=tuple(generator.get("native_includes", ())),
            file_header=generator.get("file_header", defaults.file_header),
        )


DEFAULT_OPTIONS = EmitterOptions()
