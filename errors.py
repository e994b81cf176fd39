"""Error taxonomy shared by the lifecycle service, the HTTP layer and the client."""


class LogisticsError(Exception):
    status_code = 500

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message}


class ValidationError(LogisticsError):
    status_code = 400


class NotFoundError(LogisticsError):
    status_code = 404


class PersistenceError(LogisticsError):
    status_code = 500


class DispatchDeniedError(LogisticsError):
    status_code = 403

    def __init__(self, reason="Not paid yet"):
        super().__init__("dispatch_denied")
        self.reason = reason

    def to_dict(self):
        return {"error": "dispatch_denied", "reason": self.reason}


class TransitionDeniedError(LogisticsError):
    """Raised only when strict transitions are enabled."""

    status_code = 409

    def __init__(self, current, target):
        super().__init__("transition_denied")
        self.current = current
        self.target = target
        self.reason = f"Cannot move from '{current}' to '{target}'"

    def to_dict(self):
        return {"error": "transition_denied", "reason": self.reason}
