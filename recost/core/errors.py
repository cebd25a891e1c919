"""
Exception hierarchy for the capture service.

Every error carries a `user_message` that is safe to show to the end user;
the exception text itself may hold internal details meant for logs only.
"""


class RecostError(Exception):
    user_message = "Something went wrong."

    def __init__(self, detail: str | None = None, user_message: str | None = None):
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class ExtractionError(RecostError):
    user_message = "Could not read data from the file. Try again or enter the data manually."


class EmptyModelResponseError(ExtractionError):
    """The model returned no text at all"""


class StorageError(RecostError):
    user_message = "Could not save to the cloud."


class UnknownUserError(RecostError):
    user_message = "User does not exist. Contact your administrator."


class PermissionDeniedError(RecostError):
    user_message = "This action requires an administrator account."


class InvalidStateError(RecostError):
    user_message = "This action is not available right now."


class InvalidTransitionError(InvalidStateError):
    def __init__(self, current, target):
        super().__init__(f"Cannot move from {current.value} to {target.value}")
        self.current = current
        self.target = target


class NotFoundError(RecostError):
    user_message = "Not found."


class PropertyNotFoundError(NotFoundError):
    user_message = "This property does not exist."


class PendingInvoiceNotFoundError(NotFoundError):
    user_message = "This e-invoice is no longer pending."
