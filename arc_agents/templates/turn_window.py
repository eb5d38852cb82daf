from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional


@dataclass(frozen=True)
class TurnRecord:
    """
    One completed turn as the model will see it again next round:
    the user message, the model's raw output items, and the tool output we fed back.
    Only built after the action has been both decided and submitted.
    """

    prompt: dict[str, Any]
    action: str
    output_items: tuple[Any, ...] = ()
    outcome: dict[str, Any] = field(default_factory=dict)

    def items(self) -> Iterator[Any]:
        yield self.prompt
        yield from self.output_items
        yield self.outcome


def build_tool_output(
    call_id: Optional[str],
    action_name: str,
    coords: Optional[dict[str, int]],
    score: int,
    state: str,
    full_reset: bool,
) -> dict[str, Any]:
    """
    The outcome item replayed after a turn's output items.

    A `function_call_output` must answer a `function_call` in the same input, so when the
    model produced no call (the RESET fallback) the result goes back as user text instead.
    """
    body: dict[str, Any] = {"status": "success", "action": action_name}
    if coords:
        body.update(coords)
    body["result"] = {"score": score, "state": state, "full_reset": full_reset}
    if call_id is None:
        return {
            "role": "user",
            "content": [{"type": "input_text", "text": f"No tool call was made; submitted instead: {json.dumps(body)}"}],
        }
    return {
        "type": "function_call_output",
        "call_id": call_id,
        "output": json.dumps(body),
    }


class TurnWindow:
    """Fixed-capacity FIFO of TurnRecords; the oldest turn is evicted first."""

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("turn window limit must be >= 1")
        self.limit = limit
        self._turns: deque[TurnRecord] = deque(maxlen=limit)

    def append(self, turn: TurnRecord) -> None:
        self._turns.append(turn)

    def clear(self) -> None:
        self._turns.clear()

    def flatten(self) -> Iterator[Any]:
        """Chronological input items: prompt, output items, outcome for each turn."""
        for turn in list(self._turns):
            yield from turn.items()

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[TurnRecord]:
        return iter(list(self._turns))
