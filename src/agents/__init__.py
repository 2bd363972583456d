"""AI Agents package."""

from src.agents.ai_agents import (
    FALLBACK_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    InsightResponse,
    InsightsAgent,
)

__all__ = [
    "FALLBACK_MESSAGE",
    "NOT_CONFIGURED_MESSAGE",
    "InsightResponse",
    "InsightsAgent",
]
