# chat_triggers/domain/exceptions.py


class ChatTriggerError(Exception):
    pass


class ResolutionError(ChatTriggerError):
    """A message event that cannot be turned into any recipient."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class PushDeliveryError(ChatTriggerError):
    pass


class BatchLimitExceeded(ChatTriggerError):
    pass


class InvocationRejected(ChatTriggerError):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
