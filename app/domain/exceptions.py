"""Errors surfaced to callers of the notification core."""


class ValidationError(ValueError):
    """Raised when required notification input is missing or malformed."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(LookupError):
    """Raised when an operation references an unknown notification id."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification with id {notification_id} not found")
        self.notification_id = notification_id


__all__ = ["NotFoundError", "ValidationError"]
