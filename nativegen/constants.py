from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class Constant:
    name: str
    value: int | str

    @property
    def rendered_value(self) -> str:
        if isinstance(self.value, int):
            return f"0x{self.value:X}" if self.value >= 0 else str(self.value)
        return self.value


@dataclass(frozen=True)
class ConstantBlock:
    documentation: str
    constants: tuple[Constant, ...]
    java_type: str = "int"

    @property
    def names(self) -> list[str]:
        return [constant.name for constant in self.constants]


class ConstantPool:
    """Maps constant names to the class that declares them.

    The pool is filled once from every native class taking part in a run and
    then frozen; emitters only read from it.
    """

    def __init__(self):
        self._links: dict[str, str] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, class_name: str, prefix: str, blocks: Iterable[ConstantBlock]) -> None:
        if self._frozen:
            raise RuntimeError("The constant pool is frozen")
        for block in blocks:
            for constant in block.constants:
                self._links.setdefault(constant.name, f"{class_name}#{prefix}{constant.name}")

    def register_class(self, native_class) -> None:
        self.register(native_class.class_name, native_class.prefix_constant, native_class.constant_blocks)

    def freeze(self) -> "ConstantPool":
        self._frozen = True
        return self

    def __contains__(self, name: str) -> bool:
        return name in self._links

    def link(self, name: str) -> str:
        try:
            target = self._links[name]
        except KeyError:
            raise ValueError(f"Unknown constant: {name}") from None
        return f"{{@link {target} {name}}}"

    def links(self, text: str) -> list[str]:
        """Render a whitespace separated list of constant references as javadoc links.

        Qualified references (``GL15#GL_ARRAY_BUFFER``) are linked as-is, bare
        names are looked up in the pool.
        """
        rendered = []
        for token in text.split():
            if "#" in token:
                rendered.append(f"{{@link {token}}}")
            else:
                rendered.append(self.link(token))
        return rendered
