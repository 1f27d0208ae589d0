from enum import Enum, auto


class ParameterType(Enum):
    IN = auto()
    OUT = auto()
    INOUT = auto()


class GenerationMode(Enum):
    NORMAL = auto()
    ALTERNATIVE = auto()
