class OrchestratorError(Exception):
    """Base class for errors raised while preparing an answer request."""


class InvalidContextError(OrchestratorError):
    def __init__(self, context: object):
        super().__init__(f"Unrecognized context tag: {context!r}")
        self.context = context


class CallerSystemMessageError(OrchestratorError):
    def __init__(self):
        super().__init__("Conversation must not contain system messages")


class EmptyConversationError(OrchestratorError):
    def __init__(self):
        super().__init__("Conversation must contain at least one message")


class ModelPoolError(OrchestratorError):
    """Raised when the model pool configuration is invalid."""
