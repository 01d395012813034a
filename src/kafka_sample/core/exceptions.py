class KafkaClientNotStartedError(RuntimeError):
    """Raised when the client is used before ``start()`` or after ``stop()``."""


class CodecError(ValueError):
    """Raised when a payload cannot be converted to or from its wire form."""
