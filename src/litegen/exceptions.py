class LitegenError(Exception):
    """Base class for all litegen errors."""


class VocabularyError(LitegenError, ValueError):
    """Raised when a vocabulary resource is malformed."""


class EngineNotInitializedError(LitegenError, RuntimeError):
    """Raised when generation is requested before the interpreter is ready."""


class RuntimeBackendError(LitegenError):
    """Raised when an inference backend cannot be built or does not match the declared tensor specs."""
