"""Exceptions raised by flowcover."""


class FlowcoverError(Exception):
    """Base class for all flowcover errors."""


class FunctionNotFoundError(FlowcoverError, LookupError):
    """The requested function is not defined in the parsed source."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        message = f"Function '{name}' not found"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class UnknownCriterionError(FlowcoverError, ValueError):
    """A coverage criterion name that is not supported."""

    def __init__(self, name: str, known: list[str]):
        self.name = name
        self.known = known
        super().__init__(
            f"Unknown coverage criterion '{name}' (expected one of: {', '.join(known)})"
        )
