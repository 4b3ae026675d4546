class EngineError(Exception):
    """Base exception for all traffic engine errors."""
    pass


class DecodeError(EngineError):
    """Raised when a model output buffer contradicts its own declared shape."""
    pass


class ConfigurationError(EngineError):
    """Raised when configuration is invalid."""
    pass
