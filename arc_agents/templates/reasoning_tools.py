"""
The `choose_action` tool: a strict, single-choice decision contract built from the
actions the game currently permits.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator

from ..structs import COORD_MAX, COORD_MIN, FrameData, GameAction

TOOL_NAME = "choose_action"
COORD_ACTION = GameAction.ACTION6.name
DEFAULT_ALLOWED = [
    GameAction.ACTION1.name,
    GameAction.ACTION2.name,
    GameAction.ACTION3.name,
    GameAction.ACTION4.name,
]

# field -> (minLength, maxLength, description)
TEXT_FIELDS: dict[str, tuple[int, int, str]] = {
    "reason": (10, 2000, "Detailed reasoning for choosing this action"),
    "short_description": (5, 500, "Brief description of the action"),
    "hypothesis": (10, 2000, "Current hypothesis about game mechanics"),
    "aggregated_findings": (10, 2000, "Summary of discoveries and learnings so far"),
}


def allowed_action_names(latest_frame: Optional[FrameData]) -> list[str]:
    """Names the model may choose this turn; RESET is always appended."""
    ids = latest_frame.available_actions if latest_frame is not None else []
    names: list[str] = []
    for action_id in ids or []:
        try:
            name = GameAction.from_id(action_id).name
        except ValueError:
            continue
        if name not in names:
            names.append(name)
    if not names:
        names = list(DEFAULT_ALLOWED)
    if GameAction.RESET.name not in names:
        names.append(GameAction.RESET.name)
    return names


def build_reasoning_tools(allowed_names: list[str]) -> list[dict[str, Any]]:
    """Responses-API function tool for the permitted actions (strict, closed schema)."""
    properties: dict[str, Any] = {}
    for field, (lo, hi, desc) in TEXT_FIELDS.items():
        properties[field] = {
            "type": "string",
            "description": desc,
            "minLength": lo,
            "maxLength": hi,
        }
    properties["action"] = {
        "type": "string",
        "description": f"Choose one of: {', '.join(allowed_names)}",
        "enum": list(allowed_names),
    }
    required = [*TEXT_FIELDS.keys(), "action"]

    has_coords = COORD_ACTION in allowed_names
    if has_coords:
        for axis in ("x", "y"):
            properties[axis] = {
                "type": ["integer", "null"],
                "description": (
                    f"Required when action=={COORD_ACTION}. {axis.upper()} coordinate in "
                    f"[{COORD_MIN},{COORD_MAX}]; otherwise null."
                ),
                "minimum": COORD_MIN,
                "maximum": COORD_MAX,
            }
        required += ["x", "y"]

    description = f"Choose exactly one game action from [{', '.join(allowed_names)}] and justify it."
    if has_coords:
        description += f" If {COORD_ACTION}, include integer x,y in [{COORD_MIN},{COORD_MAX}]."

    return [
        {
            "type": "function",
            "name": TOOL_NAME,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
                "additionalProperties": False,
            },
            "strict": True,
        }
    ]


def _text_field(name: str) -> Any:
    lo, hi, desc = TEXT_FIELDS[name]
    return Field(min_length=lo, max_length=hi, description=desc)


class DecisionArguments(BaseModel):
    """
    Validated `choose_action` arguments.

    Two variants share this model: a simple action with x/y null, or the coordinate
    action with both x and y present. The permitted-name set is passed through the
    validation context as `allowed_names`. Text bounds are the same TEXT_FIELDS the
    tool schema advertises.
    """

    model_config = ConfigDict(extra="forbid")

    reason: str = _text_field("reason")
    short_description: str = _text_field("short_description")
    hypothesis: str = _text_field("hypothesis")
    aggregated_findings: str = _text_field("aggregated_findings")
    action: str
    x: Optional[int] = None
    y: Optional[int] = None

    @model_validator(mode="after")
    def _check_variant(self, info: ValidationInfo) -> "DecisionArguments":
        allowed: Optional[Iterable[str]] = (info.context or {}).get("allowed_names")
        if allowed is not None and self.action not in allowed:
            raise ValueError(f"action {self.action!r} is not one of {list(allowed)}")
        if self.action == COORD_ACTION:
            if self.x is None or self.y is None:
                raise ValueError(f"{COORD_ACTION} requires both x and y")
        elif self.x is not None or self.y is not None:
            raise ValueError(f"x/y must be null unless action is {COORD_ACTION}")
        return self


def action_docs(names: list[str]) -> str:
    docs = {
        "RESET": "Initialize or restarts the game/level state",
        "ACTION1": "Simple action - varies by game (semantically mapped to up)",
        "ACTION2": "Simple action - varies by game (semantically mapped to down)",
        "ACTION3": "Simple action - varies by game (semantically mapped to left)",
        "ACTION4": "Simple action - varies by game (semantically mapped to right)",
        "ACTION5": "Simple action - varies by game (e.g., interact, select, rotate, attach/detach, execute, etc.)",
        "ACTION6": f"Complex action requiring x,y coordinates ({COORD_MIN}-{COORD_MAX} range)",
        "ACTION7": "Simple action - Undo (e.g., interact, select)",
    }
    return "\n".join(f"- {n}: {docs.get(n, '')}" for n in names)
