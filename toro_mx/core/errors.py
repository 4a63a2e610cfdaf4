"""Domain errors raised by the services and translated by the API layer"""


class InvalidInput(ValueError):
    """Caller supplied values the computation cannot accept. Never retried."""


class ProviderError(RuntimeError):
    """An upstream HTTP provider answered with an error or an unusable body."""


class PacError(RuntimeError):
    """The invoicing PAC rejected or failed to stamp a CFDI."""
