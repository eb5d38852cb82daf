from typing import Type, cast

from dotenv import load_dotenv

from .agent import Agent, Phase, SessionState
from .game_client import GameClient, GameClientError
from .swarm import Swarm
from .templates.reasoning_agent import ReasoningAgent

load_dotenv()

AVAILABLE_AGENTS: dict[str, Type[Agent]] = {
    cls.__name__.lower(): cast(Type[Agent], cls)
    for cls in Agent.__subclasses__()
}

# friendly aliases
AVAILABLE_AGENTS.update({
    "reasoning-agent": ReasoningAgent,
    "reasoning_agent": ReasoningAgent,
})

__all__ = [
    "Agent",
    "Phase",
    "SessionState",
    "GameClient",
    "GameClientError",
    "Swarm",
    "ReasoningAgent",
    "AVAILABLE_AGENTS",
]
