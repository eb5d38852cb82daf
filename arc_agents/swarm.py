from __future__ import annotations

import json
import logging
import os
import signal
import threading
from typing import Any, Optional, Type

import requests

from .agent import Agent, SessionState
from .game_client import GameClient, GameClientError

log = logging.getLogger(__name__)


def select_games(client: GameClient, game_filter: str = "") -> list[str]:
    """All games for this key, optionally narrowed to ids starting with `game_filter`."""
    all_games = client.list_games()
    games = [g for g in all_games if g.startswith(game_filter)] if game_filter else all_games
    if not games:
        raise ValueError("No games available (check ARC_API_KEY or the GAME_ID filter).")
    return games


class Swarm:
    """
    Opens one scorecard, plays each game to completion one after another, and closes
    the scorecard exactly once whatever way the run ends.
    """

    def __init__(
        self,
        agent_class: Type[Agent],
        game_ids: list[str],
        client: GameClient,
        tags: Optional[list[str]] = None,
        agent_kwargs: Optional[dict[str, Any]] = None,
    ) -> None:
        self.agent_class = agent_class
        self.game_ids = game_ids
        self.client = client
        self.tags = tags or []
        self.agent_kwargs = agent_kwargs or {}
        self.card_id: Optional[str] = None
        self.stop_event = threading.Event()
        self.results: list[SessionState] = []
        self._teardown_lock = threading.Lock()
        self._torn_down = False

    def main(self) -> list[SessionState]:
        self.card_id = self.client.open_scorecard(self.tags)
        log.info(f"Scorecard opened: {self.card_id}")
        try:
            for game_id in self.game_ids:
                if self.stop_event.is_set():
                    break
                log.info(f"=== Playing {game_id} ===")
                agent = self.agent_class(
                    game_id=game_id,
                    card_id=self.card_id,
                    game_client=self.client,
                    stop_event=self.stop_event,
                    **self.agent_kwargs,
                )
                try:
                    agent.main()
                finally:
                    self.results.append(agent.session)
        finally:
            self.teardown()
        return self.results

    def teardown(self) -> Optional[dict[str, Any]]:
        """Close the scorecard. Runs at most once; never raises."""
        with self._teardown_lock:
            if self._torn_down:
                return None
            self._torn_down = True

        if not self.card_id:
            log.info("No open scorecard to close.")
            return None
        try:
            report = self.client.close_scorecard(self.card_id)
        except (requests.RequestException, GameClientError, ValueError) as e:
            log.error(f"Failed to close scorecard '{self.card_id}': {e}")
            log.info(f"Scorecard link (may remain open): {self.client.scorecard_url(self.card_id)}")
            return None
        log.info("--- SCORECARD REPORT ---\n" + json.dumps(report, indent=2))
        log.info(f"View your scorecard: {self.client.scorecard_url(self.card_id)}")
        return report

    def request_stop(self, reason: str) -> None:
        """First call: stop after the current turn. Second call: exit immediately."""
        if self.stop_event.is_set():
            log.warning(f"Received {reason} again, exiting immediately.")
            os._exit(130)
        log.warning(f"Received {reason}, stopping after the current turn...")
        self.stop_event.set()

    def install_signal_handlers(self) -> None:
        def handler(signum: int, _frame: Any) -> None:
            self.request_stop(signal.Signals(signum).name)

        signal.signal(signal.SIGINT, handler)
        signal.signal(signal.SIGTERM, handler)
