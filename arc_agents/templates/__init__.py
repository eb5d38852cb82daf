from .reasoning_agent import ReasoningAgent

__all__ = ["ReasoningAgent"]
