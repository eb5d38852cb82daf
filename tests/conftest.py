import json
from typing import Any, Optional

import pytest

from arc_agents.structs import FrameData, GameAction
from arc_agents.templates.decision import parse_decision


def make_frame(
    state: str = "NOT_FINISHED",
    score: int = 0,
    guid: Optional[str] = "guid-1",
    full_reset: bool = False,
    available_actions: Optional[list[int]] = None,
    grid: Optional[list[list[int]]] = None,
) -> FrameData:
    return FrameData.model_validate(
        {
            "game_id": "ls20-test",
            "frame": [grid if grid is not None else [[0, 1], [2, 3]]],
            "state": state,
            "score": score,
            "guid": guid,
            "full_reset": full_reset,
            "available_actions": [1, 2, 3, 4] if available_actions is None else available_actions,
        }
    )


def function_call(args: dict[str, Any], call_id: str = "call_1") -> dict[str, Any]:
    return {
        "type": "function_call",
        "call_id": call_id,
        "name": "choose_action",
        "arguments": json.dumps(args),
    }


def choice(action: str, **extra: Any) -> dict[str, Any]:
    args = {
        "reason": "Testing how the board reacts to this move.",
        "short_description": f"try {action}",
        "hypothesis": "Moves shift the player sprite by one cell.",
        "aggregated_findings": "Nothing conclusive observed yet.",
        "action": action,
    }
    args.update(extra)
    return args


class FakeGameClient:
    """Scripted backend: the first submit gets frames[0], and so on (last one repeats)."""

    def __init__(self, frames: list[FrameData]) -> None:
        self.frames = list(frames)
        self.calls: list[dict[str, Any]] = []
        self.opened: list[list[str]] = []
        self.closed: list[str] = []
        self.close_error: Optional[Exception] = None

    def submit(self, game_id, action, guid=None, x=None, y=None, reasoning=None, card_id=None):
        self.calls.append(
            {"game_id": game_id, "action": action, "guid": guid, "x": x, "y": y,
             "reasoning": reasoning, "card_id": card_id}
        )
        idx = min(len(self.calls) - 1, len(self.frames) - 1)
        return self.frames[idx]

    def reset(self, game_id, card_id=None, guid=None, reasoning=None):
        return self.submit(game_id, GameAction.RESET, guid=guid, reasoning=reasoning, card_id=card_id)

    def actions(self) -> list[GameAction]:
        return [c["action"] for c in self.calls]

    def open_scorecard(self, tags):
        self.opened.append(tags)
        return "card-1"

    def close_scorecard(self, card_id):
        if self.close_error is not None:
            raise self.close_error
        self.closed.append(card_id)
        return {"card_id": card_id, "won": 0}

    def scorecard_url(self, card_id):
        return f"https://example.test/scorecards/{card_id}"

    def replay_url(self, game_id, guid):
        return f"https://example.test/replay/{game_id}/{guid}"


class FakeDecisionClient:
    """Feeds scripted choose_action arguments through the real parser."""

    def __init__(self, script: list[Any]) -> None:
        self.script = list(script)
        self.inputs: list[list[Any]] = []
        self.allowed: list[list[str]] = []
        self.on_decide = None

    def decide(self, input_items, tools, instructions, allowed_names, tag=""):
        self.inputs.append(list(input_items))
        self.allowed.append(list(allowed_names))
        if self.on_decide is not None:
            self.on_decide(len(self.inputs))
        step = self.script[min(len(self.inputs) - 1, len(self.script) - 1)]
        if isinstance(step, Exception):
            raise step
        if isinstance(step, list):
            # raw output items, e.g. a plain assistant message with no tool call
            return parse_decision(step, allowed_names, tag=tag)
        return parse_decision([function_call(step, call_id=f"call_{len(self.inputs)}")], allowed_names, tag=tag)


@pytest.fixture(autouse=True)
def no_side_files(monkeypatch):
    monkeypatch.delenv("DEBUG_MESSAGES_PATH", raising=False)
    monkeypatch.setenv("TRANSCRIPTS", "0")
