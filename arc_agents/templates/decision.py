"""
Decision client: one Responses-API call per turn, forced to a single `choose_action`
tool call, parsed and sanitized into a Decision.

Recovery rules (the loop never aborts on these):
  - no function call / unparseable arguments / action outside the allowed set
    → RESET, with a warning
  - ACTION6 with missing or non-numeric x,y → (0, 0), with a warning
  - ACTION6 with out-of-range x,y → clamped into [0, 63]
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Optional

from openai import OpenAI
from pydantic import ValidationError

from .. import config
from ..structs import GameAction, clamp_coordinate
from .reasoning_tools import COORD_ACTION, DecisionArguments

log = logging.getLogger(__name__)


@dataclass
class Usage:
    input_tokens: int = 0
    cached_input_tokens: int = 0
    output_tokens: int = 0
    reasoning_tokens: int = 0
    total_tokens: int = 0


@dataclass
class Decision:
    action: GameAction
    reason: str = ""
    short_description: str = ""
    hypothesis: str = ""
    aggregated_findings: str = ""
    x: Optional[int] = None
    y: Optional[int] = None
    call_id: Optional[str] = None
    output_items: list[Any] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    fallback: bool = False

    @property
    def coords(self) -> Optional[dict[str, int]]:
        if self.action.is_complex() and self.x is not None and self.y is not None:
            return {"x": self.x, "y": self.y}
        return None

    def history_entry(self) -> dict[str, str]:
        return {
            "name": self.action.name,
            "reason": self.reason,
            "short_description": self.short_description,
            "hypothesis": self.hypothesis,
            "aggregated_findings": self.aggregated_findings,
        }


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _as_wire_item(item: Any) -> Any:
    """SDK output item → plain dict so it can be replayed as input next turn."""
    if hasattr(item, "model_dump"):
        return item.model_dump(exclude_none=True)
    return item


def read_usage(response: Any) -> Usage:
    u = _get(response, "usage")
    if u is None:
        return Usage()
    input_tokens = _get(u, "input_tokens", 0) or 0
    output_tokens = _get(u, "output_tokens", 0) or 0
    total = _get(u, "total_tokens", None)
    return Usage(
        input_tokens=input_tokens,
        cached_input_tokens=_get(_get(u, "input_tokens_details"), "cached_tokens", 0) or 0,
        output_tokens=output_tokens,
        reasoning_tokens=_get(_get(u, "output_tokens_details"), "reasoning_tokens", 0) or 0,
        total_tokens=total if total is not None else input_tokens + output_tokens,
    )


def parse_decision(output_items: Iterable[Any], allowed_names: list[str], tag: str = "") -> Decision:
    """Turn raw output items into exactly one Decision (RESET when nothing usable)."""
    items = list(output_items or [])
    wire = [_as_wire_item(i) for i in items]

    call = next((i for i in items if _get(i, "type") == "function_call"), None)
    if call is None:
        log.warning(f"[{tag}] model returned no function call; defaulting to RESET")
        return Decision(action=GameAction.RESET, output_items=wire, fallback=True)

    call_id = _get(call, "call_id")
    raw_args = _get(call, "arguments") or "{}"
    try:
        args = json.loads(raw_args) or {}
        if not isinstance(args, dict):
            raise ValueError("arguments are not a JSON object")
    except (TypeError, ValueError) as e:
        log.warning(f"[{tag}] could not parse choose_action arguments ({e}); defaulting to RESET")
        return Decision(action=GameAction.RESET, call_id=call_id, output_items=wire, fallback=True)

    name = args.get("action")
    if not isinstance(name, str) or name not in allowed_names:
        log.warning(f"[{tag}] action {name!r} not in {allowed_names}; defaulting to RESET")
        return Decision(action=GameAction.RESET, call_id=call_id, output_items=wire, fallback=True)

    x: Optional[int] = None
    y: Optional[int] = None
    if name == COORD_ACTION:
        x, y = clamp_coordinate(args.get("x")), clamp_coordinate(args.get("y"))
        if x is None or y is None:
            log.warning(f"[{tag}] {COORD_ACTION} selected without valid x,y; defaulting to (0,0)")
            x, y = 0, 0

    try:
        parsed = DecisionArguments.model_validate(
            {**args, "action": name, "x": x, "y": y},
            context={"allowed_names": allowed_names},
        )
    except ValidationError as e:
        log.warning(f"[{tag}] choose_action arguments failed validation; defaulting to RESET: {e}")
        return Decision(action=GameAction.RESET, call_id=call_id, output_items=wire, fallback=True)

    return Decision(
        action=GameAction.from_name(parsed.action),
        reason=parsed.reason,
        short_description=parsed.short_description,
        hypothesis=parsed.hypothesis,
        aggregated_findings=parsed.aggregated_findings,
        x=parsed.x,
        y=parsed.y,
        call_id=call_id,
        output_items=wire,
    )


class DecisionClient:
    """Wraps `client.responses.create` with the single-choice tool contract."""

    def __init__(
        self,
        model: Optional[str] = None,
        reasoning_effort: Optional[str] = None,
        client: Optional[Any] = None,
        debug_path: Optional[str] = None,
    ) -> None:
        self.model = model or config.default_model()
        self.reasoning_effort = reasoning_effort if reasoning_effort is not None else config.default_reasoning_effort()
        self.client = client or OpenAI(api_key=config.openai_api_key())
        self.debug_path = debug_path if debug_path is not None else config.debug_messages_path()

    def build_payload(
        self,
        input_items: list[Any],
        tools: list[dict[str, Any]],
        instructions: str,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "instructions": instructions,
            "tools": tools,
            "tool_choice": "required",
            "parallel_tool_calls": False,
            "store": True,
            "input": input_items,
        }
        if self.reasoning_effort:
            payload["reasoning"] = {"effort": self.reasoning_effort, "summary": "auto"}
        return payload

    def _dump(self, input_items: list[Any]) -> None:
        if not self.debug_path:
            return
        try:
            Path(self.debug_path).write_text(
                json.dumps(input_items, ensure_ascii=False, indent=2, default=str), encoding="utf-8"
            )
        except OSError as e:
            log.debug(f"could not write debug messages to {self.debug_path}: {e}")

    def decide(
        self,
        input_items: list[Any],
        tools: list[dict[str, Any]],
        instructions: str,
        allowed_names: list[str],
        tag: str = "",
    ) -> Decision:
        self._dump(input_items)
        response = self.client.responses.create(**self.build_payload(input_items, tools, instructions))
        decision = parse_decision(_get(response, "output") or [], allowed_names, tag=tag)
        decision.usage = read_usage(response)
        return decision
