"""Error taxonomy shared by the remote client, the form validator and the controller."""


class ExpenseError(Exception):
    """Base class; ``str(err)`` is the message shown to the user."""


class ValidationError(ExpenseError):
    """Local input problem. Never reaches the backend and is not logged as a failure."""

    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        self.messages: list[str] = list(messages)
        super().__init__("\n".join(self.messages))


class NotFoundError(ExpenseError):
    """The backend answered, but the requested user or application does not exist."""


class RemoteError(ExpenseError):
    """Transport fault or server-side rejection. The remote message is kept verbatim."""

    def __init__(self, message: str, remote_message: str = ""):
        super().__init__(message)
        self.remote_message = remote_message


class ConfigurationError(ExpenseError):
    """Backend connection settings are missing or invalid."""
