"""
Type definitions used across layers
"""

from enum import StrEnum


class Phase(StrEnum):
    LOBBY = "lobby"
    ACTIVE = "active"
    FINISHED = "finished"


class Role(StrEnum):
    SHIELD = "shield"
    WARRIOR = "warrior"


class WinCondition(StrEnum):
    ELIMINATION = "elimination"
    ESCAPE = "escape"
    STALEMATE = "stalemate"
    INACTIVITY = "inactivity"
    TIMEOUT = "timeout"
    RESIGNATION = "resignation"


class ActionKind(StrEnum):
    MOVE = "move"
    PASS = "pass"
    RESIGN = "resign"
    TIMER_EXPIRY = "timerExpiry"
