"""
Application exceptions

Errors raised by the stores and the notifier. Validation failures are not
exceptions; they travel back to the client as field errors.
"""


class ReadItError(Exception):
    """Base class for errors whose message is safe to show to clients"""
    pass


class DuplicateUserError(ReadItError):
    """Unique constraint on users.email or users.username was violated"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"duplicate value for {field}")


class NotifierError(ReadItError):
    """Email could not be handed to the delivery backend"""
    pass
