from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from . import config
from .structs import FrameData, GameAction

log = logging.getLogger(__name__)


class GameClientError(RuntimeError):
    """The game backend answered, but reported an error in the body."""


class GameClient:
    """
    Thin wrapper around the ARC-AGI-3 REST API.

    A single requests.Session is kept for the whole run so the cookie jar set by the
    backend (sticky routing for a session guid) travels with every command.
    """

    def __init__(
        self,
        root_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.root_url = (root_url or config.root_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout()
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "X-API-Key": api_key if api_key is not None else config.arc_api_key(),
                "Accept": "application/json",
            }
        )

    def _post(self, path: str, payload: dict[str, Any]) -> Any:
        r = self.session.post(f"{self.root_url}{path}", json=payload, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        if isinstance(data, dict) and data.get("error"):
            raise GameClientError(f"{path}: {data['error']}")
        return data

    def list_games(self) -> list[str]:
        r = self.session.get(f"{self.root_url}/api/games", timeout=self.timeout)
        r.raise_for_status()
        return [g["game_id"] for g in r.json() or [] if isinstance(g.get("game_id"), str)]

    def open_scorecard(self, tags: list[str]) -> str:
        data = self._post("/api/scorecard/open", {"tags": tags})
        card_id = data.get("card_id")
        if not card_id:
            raise GameClientError("API did not return a card_id when opening scorecard.")
        return str(card_id)

    def close_scorecard(self, card_id: str) -> dict[str, Any]:
        return self._post("/api/scorecard/close", {"card_id": card_id})

    def scorecard_url(self, card_id: str) -> str:
        return f"{self.root_url}/scorecards/{card_id}"

    def replay_url(self, game_id: str, guid: str) -> str:
        return f"{self.root_url}/replay/{game_id}/{guid}"

    def reset(
        self,
        game_id: str,
        card_id: Optional[str] = None,
        guid: Optional[str] = None,
        reasoning: Optional[dict[str, Any]] = None,
    ) -> FrameData:
        return self.submit(game_id, GameAction.RESET, guid=guid, card_id=card_id, reasoning=reasoning)

    def submit(
        self,
        game_id: str,
        action: GameAction,
        guid: Optional[str] = None,
        x: Optional[int] = None,
        y: Optional[int] = None,
        reasoning: Optional[dict[str, Any]] = None,
        card_id: Optional[str] = None,
    ) -> FrameData:
        """POST /api/cmd/{ACTION}. card_id is only sent with RESET; x/y only with ACTION6."""
        payload: dict[str, Any] = {"game_id": game_id}
        if guid:
            payload["guid"] = guid
        if action is GameAction.RESET and card_id:
            payload["card_id"] = card_id
        if reasoning:
            payload["reasoning"] = reasoning
        if action.is_complex() and x is not None and y is not None:
            payload["x"] = x
            payload["y"] = y

        data = self._post(f"/api/cmd/{action.name}", payload)
        return FrameData.model_validate(data)

    def close(self) -> None:
        self.session.close()
