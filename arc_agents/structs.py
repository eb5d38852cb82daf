from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

COORD_MIN = 0
COORD_MAX = 63


class GameState(str, Enum):
    NOT_PLAYED = "NOT_PLAYED"
    NOT_FINISHED = "NOT_FINISHED"
    PLAYING = "PLAYING"
    WIN = "WIN"
    GAME_OVER = "GAME_OVER"


class GameAction(Enum):
    RESET = 0
    ACTION1 = 1
    ACTION2 = 2
    ACTION3 = 3
    ACTION4 = 4
    ACTION5 = 5
    ACTION6 = 6
    ACTION7 = 7

    def is_complex(self) -> bool:
        """ACTION6 is the only action that takes (x, y) coordinates."""
        return self is GameAction.ACTION6

    @classmethod
    def from_id(cls, action_id: int) -> GameAction:
        for action in cls:
            if action.value == action_id:
                return action
        raise ValueError(f"No such action id: {action_id}")

    @classmethod
    def from_name(cls, name: str) -> GameAction:
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"No such action: {name}")


def clamp_coordinate(value: Any) -> Optional[int]:
    """Truncate a numeric coordinate and clamp it into [COORD_MIN, COORD_MAX].

    Returns None when the value is not a usable number (bools count as unusable).
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value:  # NaN
        return None
    try:
        v = int(value)
    except (OverflowError, ValueError):
        v = COORD_MAX if value > 0 else COORD_MIN
    return max(COORD_MIN, min(COORD_MAX, v))


class ActionInput(BaseModel):
    id: GameAction = GameAction.RESET
    data: dict[str, Any] = Field(default_factory=dict)
    reasoning: Optional[Any] = None


class FrameData(BaseModel):
    """One snapshot of the remote game as returned by /api/cmd/*."""

    game_id: str = ""
    frame: list[list[list[int]]] = Field(default_factory=list)
    state: GameState = GameState.NOT_PLAYED
    score: int = 0
    win_score: int = 0
    guid: Optional[str] = None
    full_reset: bool = False
    available_actions: list[int] = Field(default_factory=list)
    action_input: ActionInput = Field(default_factory=ActionInput)

    def latest_grid(self) -> list[list[int]]:
        return self.frame[-1] if self.frame else []

