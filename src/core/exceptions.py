"""
Exceptions raised by the domain, service and persistence layers.

Every exception carries the HTTP status code the API layer answers with, so the routers never need to
translate errors themselves.
"""


class GammonGuruError(Exception):
    """Base class of every error the API knows how to report."""

    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


# --- 400 ---
class InvalidRequestError(GammonGuruError, ValueError):
    """Malformed input. Also a ValueError, so pydantic validators may raise it."""

    status_code = 400


# --- 401 / 403 ---
class AuthenticationError(GammonGuruError):
    status_code = 401


class PermissionDeniedError(GammonGuruError):
    status_code = 403


# --- 404 ---
class NotFoundError(GammonGuruError):
    status_code = 404


class RepositoryError(NotFoundError):
    """A record could not be found in the repository."""


class GameNotFoundError(RepositoryError):
    pass


class UserNotFoundError(RepositoryError):
    pass


# --- 409 ---
class ConflictError(GammonGuruError):
    status_code = 409


class GameError(GammonGuruError):
    """Base class for rule violations while playing."""

    status_code = 409


class GameStateError(GameError):
    """The game is not in a state that allows the requested action."""


class IllegalMoveError(GameError):
    pass


class NotYourTurnError(GameError):
    pass


# --- 429 ---
class RateLimitExceededError(GammonGuruError):
    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class QuotaExceededError(GammonGuruError):
    status_code = 429

    def __init__(self, message: str, remaining: int = 0) -> None:
        super().__init__(message)
        self.remaining = remaining


# --- 503 ---
class AnalysisUnavailableError(GammonGuruError):
    """An upstream engine or model could not be reached."""

    status_code = 503
