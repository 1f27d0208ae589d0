class ModifierError(ValueError):
    """A modifier was attached to the wrong kind of element, or twice."""


class ValidationError(ValueError):
    """A modifier reference or combination is inconsistent."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.code = code


class ResolutionError(RuntimeError):
    """An invariant the transform engine relies on does not hold."""


class TemplateError(ValueError):
    """A template file is malformed or refers to unknown types."""
