"""Exception hierarchy for the conference tracker."""


class ConfTrackerError(Exception):
    """Base class for all tracker errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class EmptyQueryError(ConfTrackerError):
    """The request carried no usable text."""

    def __init__(self, message: str = "请输入您的问题。", **kwargs):
        super().__init__(message, kwargs)


class ServiceBusyError(ConfTrackerError):
    """Unexpected failure while answering; callers get a generic message."""

    def __init__(self, message: str = "系统繁忙，请稍后再试。", **kwargs):
        super().__init__(message, kwargs)


class CatalogUnavailableError(ConfTrackerError):
    """The catalog store could not be read."""

    def __init__(self, message: str, store: str = None, **kwargs):
        super().__init__(message, kwargs)
        self.store = store
