# arc_agents/templates/reasoning_agent.py
from __future__ import annotations

import json
import logging
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .. import config
from ..agent import Agent, SessionState
from ..structs import ActionInput, FrameData
from .decision import Decision, DecisionClient, Usage
from .reasoning_prompts import build_system_prompt, build_turn_text, build_user_message
from .reasoning_tools import allowed_action_names, build_reasoning_tools
from .render import grid_to_png_base64, png_data_url
from .turn_window import TurnRecord, TurnWindow, build_tool_output

log = logging.getLogger(__name__)


class ReasoningAgent(Agent):
    """
    Vision + raw-grid agent that asks a reasoning model for one `choose_action` call per
    turn. The model sees the last MESSAGE_LIMIT completed turns (prompt, its own output,
    and the tool result) followed by the current screen.
    """

    MAX_ACTIONS = 400
    MESSAGE_LIMIT = 5
    SCREEN_HISTORY_LIMIT = 10
    AGENT_TYPE = "reasoning_agent"

    def __init__(
        self,
        *args: Any,
        model: Optional[str] = None,
        reasoning_effort: Optional[str] = None,
        decision_client: Optional[DecisionClient] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.model = model or config.default_model()
        self.reasoning_effort = reasoning_effort if reasoning_effort is not None else config.default_reasoning_effort()
        self.decision_client = decision_client or DecisionClient(
            model=self.model, reasoning_effort=self.reasoning_effort
        )
        self.window = TurnWindow(self.MESSAGE_LIMIT)
        self.history: list[dict[str, str]] = []
        self.screen_history: deque[str] = deque(maxlen=self.SCREEN_HISTORY_LIMIT)
        self._pending: Optional[tuple[dict[str, Any], Decision, str]] = None
        self._transcript_file = None
        self._transcript_counter = 0

    @property
    def name(self) -> str:
        sanitized_model_name = self.model.replace("/", "-").replace(":", "-")
        name = f"{super().name}.{sanitized_model_name}"
        if self.reasoning_effort:
            name += f".{self.reasoning_effort}"
        return name

    def clear_history(self) -> None:
        self.history = []
        self.screen_history.clear()

    def track_usage(self, session: SessionState, usage: Usage) -> None:
        session.token_counter += usage.total_tokens
        session.last_reasoning_tokens = usage.reasoning_tokens
        session.total_reasoning_tokens += usage.reasoning_tokens
        log.info(
            f"[{self.game_id}] tokens in={usage.input_tokens} (cached={usage.cached_input_tokens}) "
            f"out={usage.output_tokens} reason={usage.reasoning_tokens} total={usage.total_tokens} "
            f"| cum={session.token_counter}"
        )

    def _game_context(self, session: SessionState, latest_frame: Optional[FrameData]) -> dict[str, Any]:
        return {
            "score": latest_frame.score if latest_frame else 0,
            "state": latest_frame.state.value if latest_frame else "NOT_PLAYED",
            "action_counter": session.action_counter,
            "frame_count": len(self.frames),
        }

    def reset_reasoning(self, session: SessionState) -> dict[str, Any]:
        return {
            "model": self.model,
            "agent_type": self.AGENT_TYPE,
            "response_preview": "Initial reset",
            "action_chosen": "RESET",
            "game_context": self._game_context(session, None),
        }

    def build_reasoning_meta(
        self, session: SessionState, latest_frame: FrameData, decision: Decision
    ) -> dict[str, Any]:
        u = decision.usage
        meta: dict[str, Any] = {
            "model": self.model,
            "agent_type": self.AGENT_TYPE,
            "reasoning_tokens": u.reasoning_tokens,
            "total_reasoning_tokens": session.total_reasoning_tokens,
            "tokens": {
                "input": u.input_tokens,
                "cached_input": u.cached_input_tokens,
                "output": u.output_tokens,
                "total": u.total_tokens,
                "cumulative_total": session.token_counter,
            },
            "hypothesis": decision.hypothesis,
            "aggregated_findings": decision.aggregated_findings,
            "response_preview": decision.reason[:200],
            "action_chosen": decision.action.name,
            "game_context": self._game_context(session, latest_frame),
        }
        if self.reasoning_effort:
            meta["reasoning_effort"] = self.reasoning_effort
        return meta

    def choose_action(
        self, session: SessionState, frames: list[FrameData], latest_frame: FrameData
    ) -> ActionInput:
        allowed = allowed_action_names(latest_frame)
        log.info(f"[{self.game_id}] allowed actions this turn: {', '.join(allowed)}")
        tools = build_reasoning_tools(allowed)
        instructions = build_system_prompt(allowed)

        screen_b64 = grid_to_png_base64(latest_frame.latest_grid())
        user_message = build_user_message(build_turn_text(allowed, latest_frame.frame), png_data_url(screen_b64))
        input_items = [*self.window.flatten(), user_message]

        self._log_api_call(user_message, len(input_items))
        decision = self.decision_client.decide(input_items, tools, instructions, allowed, tag=self.game_id)
        self._log_decision(decision)
        self.track_usage(session, decision.usage)

        self._pending = (user_message, decision, screen_b64)
        return ActionInput(
            id=decision.action,
            data=decision.coords or {},
            reasoning=self.build_reasoning_meta(session, latest_frame, decision),
        )

    def on_turn_complete(self, session: SessionState, action: ActionInput, frame: FrameData) -> None:
        if self._pending is None:
            return
        user_message, decision, screen_b64 = self._pending
        self._pending = None

        outcome = build_tool_output(
            decision.call_id,
            decision.action.name,
            decision.coords,
            frame.score,
            frame.state.value,
            frame.full_reset,
        )
        self.window.append(
            TurnRecord(
                prompt=user_message,
                action=decision.action.name,
                output_items=tuple(decision.output_items),
                outcome=outcome,
            )
        )
        self.history.append(decision.history_entry())
        self.screen_history.append(screen_b64)

        if frame.full_reset:
            log.info(f"[{self.game_id}] backend reported a full reset; dropping {len(self.window)} turns of context")
            self.window.clear()
            self.clear_history()

    def cleanup(self, session: SessionState) -> None:
        self._close_transcript()
        super().cleanup(session)

    # Transcript helpers (enabled with TRANSCRIPTS=1)

    def _open_transcript(self) -> None:
        if not config.transcripts_enabled() or self._transcript_file:
            return
        dir_path = Path(config.transcripts_dir())
        dir_path.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        path = dir_path / f"{self.name}.{stamp}.transcript.txt"
        self._transcript_file = open(path, "a", encoding="utf-8")
        self._tw(f"# transcript opened {stamp}")

    def _close_transcript(self) -> None:
        if self._transcript_file:
            self._tw("# end of transcript")
            try:
                self._transcript_file.close()
            finally:
                self._transcript_file = None

    def _tw(self, s: str) -> None:
        if not self._transcript_file:
            return
        self._transcript_file.write(s if s.endswith("\n") else s + "\n")
        self._transcript_file.flush()

    def _log_api_call(self, user_message: dict[str, Any], n_items: int) -> None:
        self._open_transcript()
        if not self._transcript_file:
            return
        self._transcript_counter += 1
        self._tw(f"\n=== PROMPT #{self._transcript_counter} model={self.model} items={n_items} ===")
        # the image part is omitted, it is already in screen_history
        self._tw(user_message["content"][0]["text"])

    def _log_decision(self, decision: Decision) -> None:
        if not self._transcript_file:
            return
        self._tw("\nassistant_decision:")
        self._tw(json.dumps({**decision.history_entry(), "coords": decision.coords}, ensure_ascii=False, indent=2))
