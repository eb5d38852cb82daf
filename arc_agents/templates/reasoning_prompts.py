# arc_agents/templates/reasoning_prompts.py
from __future__ import annotations

import textwrap
from typing import Any

from ..structs import COORD_MAX, COORD_MIN
from .reasoning_tools import COORD_ACTION, action_docs


def pretty_print_3d(array_3d: list[list[list[Any]]]) -> str:
    lines: list[str] = []
    for i, block in enumerate(array_3d or []):
        lines.append(f"Grid {i}:")
        for row in block:
            lines.append(f"  {row}")
        lines.append("")
    return "\n".join(lines)


def build_system_prompt(allowed_names: list[str]) -> str:
    coord = ""
    if COORD_ACTION in allowed_names:
        coord = f"\n\nProvide coordinates only when selecting {COORD_ACTION}; otherwise set x and y to null."
    return textwrap.dedent(
        """
You are an intelligent game researcher tasked with reverse-engineering the rules of a complex puzzle game.

## OBJECTIVE
Your primary mission is to:
1. Discover and understand the complete game mechanics through experimentation
2. Document your findings clearly for your research team
3. Develop a comprehensive theory of how the game operates

## GAME CONTEXT
- This is a sophisticated puzzle game that resembles an IQ test or logic challenge
- The game state is represented as a grid-based environment
- You will receive both visual screenshots and raw numerical grid data
- Game mechanics are unknown and must be discovered through systematic testing

## AVAILABLE ACTIONS
You must choose exactly ONE action per turn from the following options:

{ref}{coord}

## RESEARCH METHODOLOGY
Your systematic approach should follow this framework:

### 1. HYPOTHESIS FORMATION
- Based on current observations, formulate specific testable theories about game mechanics
- Consider UI elements, player representation, interactive objects, and environmental features
- Pay attention to visual indicators like health/lives, energy meters, inventory, score, etc.

### 2. EXPERIMENTAL TESTING
- Design targeted experiments to validate or refute your hypotheses
- Compare before/after screenshots to identify cause-and-effect relationships
- Test edge cases and boundary conditions
- Document unexpected behaviors or anomalies

### 3. KNOWLEDGE SYNTHESIS
- Consolidate confirmed findings into a coherent understanding
- Identify patterns across different game states
- Build a mental model of the game's rule system
- Note interactions between different game elements (walls, doors, keys, collectibles, etc.)

## ANALYSIS FOCUS AREAS
- **UI Elements**: Lives, energy, score, timers, inventory, action counters
- **Player Character**: Appearance, capabilities, movement constraints
- **Environment**: Obstacles, interactive objects, terrain types
- **Game Logic**: Win/lose conditions, progression mechanics, resource management
- **Visual Feedback**: State changes, animations, highlighting, color coding

Remember: Each action provides valuable data. Observe carefully, think systematically, and build your understanding incrementally.
        """
    ).format(ref=action_docs(allowed_names), coord=coord).strip() + "\n"


def build_turn_text(allowed_names: list[str], frame_3d: list[list[list[int]]]) -> str:
    coord = ""
    if COORD_ACTION in allowed_names:
        coord = f"If you choose {COORD_ACTION}, include integer x,y in [{COORD_MIN},{COORD_MAX}].\n"
    return (
        "Attached are the visual screen and raw grid data.\n\n"
        f"Allowed actions this turn: {', '.join(allowed_names)}\n"
        f"{coord}"
        f"Raw Grid:\n{pretty_print_3d(frame_3d)}\n\nWhat should you do next?"
    )


def build_user_message(text: str, image_data_url: str) -> dict[str, Any]:
    """One Responses-API user message: text first, then the screenshot."""
    return {
        "role": "user",
        "content": [
            {"type": "input_text", "text": text},
            {"type": "input_image", "image_url": image_data_url},
        ],
    }
