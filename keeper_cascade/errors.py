"""Exceptions raised by the keeper cost engine."""


class ConfigurationError(ValueError):
    """League keeper settings are missing or invalid.

    Raised before any calculation runs. Callers should surface the message to
    the commissioner rather than retrying with default rules.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
