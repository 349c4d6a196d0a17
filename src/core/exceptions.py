"""
Error hierarchy shared by all layers.

Every error carries a machine-readable `kind`, so that a transport layer can translate it into a response
without knowing about the individual classes. The engine itself knows nothing about status codes.
"""


class GameError(Exception):
    """Base class: any rejected request / action."""

    kind: str = "GameError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


# --- ENGINE ERRORS ---
class InvalidConfigError(GameError):
    kind = "InvalidConfig"


class GameFullError(GameError):
    kind = "GameFull"


class AlreadyJoinedError(GameError):
    kind = "AlreadyJoined"


class NotYourTurnError(GameError):
    kind = "NotYourTurn"


class NotFoundError(GameError):
    kind = "NotFound"


class OutOfBoundsError(GameError):
    kind = "OutOfBounds"


class IllegalMoveError(GameError):
    """Blocked path, restricted cell, wrong movement for the role, or an action the current phase does not accept."""

    kind = "IllegalMove"


class GameOverError(GameError):
    kind = "GameOver"


# --- LAYER ERRORS ---
class InvalidRequestError(GameError):
    """Request could not be interpreted by the API models."""

    kind = "InvalidRequest"


class RepositoryError(GameError):
    kind = "Repository"
