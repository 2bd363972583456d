"""
AI Agents for Budget Tracker

CRITICAL BOUNDARIES:

INSIGHTS AGENT:
   - CAN: Read the annual summary (totals per month) and suggest tips
   - CANNOT: See individual entries, descriptions or ids
   - CANNOT: Change the budget in any way
   - MUST: Degrade to a fixed message when unconfigured or failing

The tips are advisory text only. Nothing the model returns is parsed
back into budget data.
"""

import json
from typing import Any, Optional

import google.generativeai as genai
from pydantic import BaseModel, Field

from src.audit import AuditLogger
from src.config import GeminiSettings, get_settings
from src.models.budget import AnnualSummary


NOT_CONFIGURED_MESSAGE = (
    "Financial tips are not available: no Gemini API key is configured. "
    "Set GEMINI_API_KEY in your environment or .env file to enable them."
)

FALLBACK_MESSAGE = (
    "Could not load financial tips right now. "
    "Check your connection and try again later."
)


class InsightResponse(BaseModel):
    """Tips returned to the UI."""

    text: str = Field(
        description="Markdown text shown to the user"
    )
    generated: bool = Field(
        description="True if the model produced the text, False for a fixed message"
    )


class InsightsAgent:
    """
    Asks Gemini for practical tips based on the annual summary.

    BOUNDARIES:
    - NEVER raises to the caller
    - NEVER sends entry-level data
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._audit_logger = audit_logger
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    @staticmethod
    def build_prompt(summary: AnnualSummary) -> str:
        data = json.dumps(summary.to_prompt_dict(), ensure_ascii=False)
        return f"""Analyse this annual personal budget summary and give 3 practical tips to improve the household's financial health.

Rules:
- Base every tip on the figures below; do not invent numbers
- Answer only with the tips, as short markdown bullet points
- Amounts are in Brazilian reais (R$)

Data: {data}"""

    async def get_financial_insights(self, summary: AnnualSummary) -> InsightResponse:
        """
        Generate tips for the given summary.

        Returns a fixed message when the service is not configured or the
        call fails.
        """
        if not self.is_available:
            return InsightResponse(text=NOT_CONFIGURED_MESSAGE, generated=False)

        try:
            response = await self._model.generate_content_async(self.build_prompt(summary))
            text = (response.text or "").strip()
            if not text:
                raise ValueError("Empty response from model")
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_insights_failed(error_message=str(e))
            return InsightResponse(text=FALLBACK_MESSAGE, generated=False)

        if self._audit_logger:
            self._audit_logger.log_insights_generated(
                model_name=self._settings.model_name,
                length=len(text),
            )
        return InsightResponse(text=text, generated=True)
