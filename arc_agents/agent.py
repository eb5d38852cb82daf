from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .game_client import GameClient
from .structs import ActionInput, FrameData, GameState

log = logging.getLogger(__name__)


class Phase(str, Enum):
    INIT = "INIT"
    RESETTING = "RESETTING"
    DECIDING = "DECIDING"
    SUBMITTING = "SUBMITTING"
    WON = "WON"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    FAILED = "FAILED"
    INTERRUPTED = "INTERRUPTED"


TERMINAL_PHASES = frozenset({Phase.WON, Phase.BUDGET_EXCEEDED, Phase.FAILED, Phase.INTERRUPTED})


@dataclass
class SessionState:
    """Per-game bookkeeping, threaded explicitly through every turn step."""

    game_id: str
    guid: Optional[str] = None
    action_counter: int = 0
    token_counter: int = 0
    last_reasoning_tokens: int = 0
    total_reasoning_tokens: int = 0
    phase: Phase = Phase.INIT
    final_score: int = 0
    error: Optional[str] = None

    @property
    def done(self) -> bool:
        return self.phase in TERMINAL_PHASES


class Agent(ABC):
    """
    Plays one game: RESET, then decide → submit → record until WIN, the action budget,
    an operator stop, or an error.

    Subclasses supply `choose_action` (the decision) and may hook `on_turn_complete`
    to keep their own context. External calls are strictly sequential.
    """

    MAX_ACTIONS: int = 80

    def __init__(
        self,
        game_id: str,
        card_id: Optional[str] = None,
        game_client: Optional[GameClient] = None,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.game_id = game_id
        self.card_id = card_id
        self.game_client = game_client or GameClient()
        self.stop_event = stop_event or threading.Event()
        self.frames: list[FrameData] = []
        self.session = SessionState(game_id=game_id)

    @property
    def name(self) -> str:
        return f"{self.game_id}.{self.__class__.__name__.lower()}"

    @property
    def action_counter(self) -> int:
        return self.session.action_counter

    # --- decision hooks ---

    @abstractmethod
    def choose_action(
        self, session: SessionState, frames: list[FrameData], latest_frame: FrameData
    ) -> ActionInput:
        """Return exactly one action (with data/reasoning) for the latest frame."""

    def is_done(self, frames: list[FrameData], latest_frame: FrameData) -> bool:
        return latest_frame.state is GameState.WIN

    def reset_reasoning(self, session: SessionState) -> Optional[dict[str, Any]]:
        return None

    def on_turn_complete(self, session: SessionState, action: ActionInput, frame: FrameData) -> None:
        pass

    def cleanup(self, session: SessionState) -> None:
        if session.guid:
            log.info(f"[{self.game_id}] replay: {self.game_client.replay_url(self.game_id, session.guid)}")

    # --- plumbing ---

    def append_frame(self, frame: FrameData) -> None:
        self.frames.append(frame)

    def _track_frame(self, session: SessionState, frame: FrameData) -> FrameData:
        if frame.guid:
            session.guid = frame.guid
        session.final_score = frame.score
        self.append_frame(frame)
        return frame

    def take_action(self, session: SessionState, action: ActionInput) -> FrameData:
        data = action.data or {}
        frame = self.game_client.submit(
            self.game_id,
            action.id,
            guid=session.guid,
            x=data.get("x"),
            y=data.get("y"),
            reasoning=action.reasoning,
            card_id=self.card_id,
        )
        return self._track_frame(session, frame)

    def start(self, session: SessionState) -> SessionState:
        session.phase = Phase.RESETTING
        frame = self.game_client.reset(
            self.game_id,
            card_id=self.card_id,
            guid=session.guid,
            reasoning=self.reset_reasoning(session),
        )
        self._track_frame(session, frame)
        log.info(f"[{self.game_id}] RESET -> score {frame.score}, state {frame.state.value}")
        if self.is_done(self.frames, frame):
            log.info(f"[{self.game_id}] WIN reached after {session.action_counter} actions")
            session.phase = Phase.WON
        else:
            session.phase = Phase.DECIDING
        return session

    def step(self, session: SessionState) -> SessionState:
        """One decide → submit → record turn."""
        session.phase = Phase.DECIDING
        latest = self.frames[-1]
        action = self.choose_action(session, self.frames, latest)

        session.phase = Phase.SUBMITTING
        frame = self.take_action(session, action)
        session.action_counter += 1
        self.on_turn_complete(session, action, frame)
        log.info(f"[{self.game_id}] {action.id.name} -> score {frame.score}, state {frame.state.value}")

        if self.is_done(self.frames, frame):
            log.info(f"[{self.game_id}] WIN reached after {session.action_counter} actions")
            session.phase = Phase.WON
        elif session.action_counter >= self.MAX_ACTIONS:
            log.warning(f"[{self.game_id}] action budget of {self.MAX_ACTIONS} exhausted")
            session.phase = Phase.BUDGET_EXCEEDED
        else:
            session.phase = Phase.DECIDING
        return session

    def main(self) -> SessionState:
        session = self.session
        try:
            session = self.start(session)
            while not session.done:
                if self.stop_event.is_set():
                    log.warning(f"[{self.game_id}] stop requested; ending after {session.action_counter} actions")
                    session.phase = Phase.INTERRUPTED
                    break
                session = self.step(session)
        except Exception as e:
            session.phase = Phase.FAILED
            session.error = str(e)
            log.error(f"[{self.game_id}] session {session.guid or '-'} failed in turn {session.action_counter + 1}: {e}")
            raise
        finally:
            self.session = session
            self.cleanup(session)
        return session
