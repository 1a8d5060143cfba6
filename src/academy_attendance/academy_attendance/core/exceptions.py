GENERIC_CHECKIN_FAILURE = "Check-in failed. Please try again or ask a staff member."
PIN_LOCKED_MESSAGE = "Too many failed attempts. Please ask a staff member for help."


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a student, class or record id does not resolve."""


class RemoteWriteError(DomainError):
    """Raised when the remote store rejects or fails a read/write.

    Transient; callers surface it and let the operator retry.
    """


class CheckInRejected(DomainError):
    """Base for kiosk rejections.

    `user_message` is what the kiosk shows; `str(exc)` is for logs.
    """

    user_message = GENERIC_CHECKIN_FAILURE

    def __init__(self, message: str = "", *, user_message: str | None = None):
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class InvalidPinError(CheckInRejected):
    """No active student holds the PIN."""


class AmbiguousPinError(CheckInRejected):
    """More than one active student holds the PIN."""


class OutsideCheckInWindowError(CheckInRejected):
    user_message = "Check-in is not open for this class right now."


class TooFarAwayError(CheckInRejected):
    user_message = "You must be at the academy to check in."
