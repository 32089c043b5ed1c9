"""Narrative budget review via a pluggable text-generation provider."""

from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .aggregation import amount
from .config import InsightsConfig
from .models import QUARTERS, BudgetPlan

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "The AI consultant is currently unavailable. Please verify API connectivity."
)
EMPTY_RESPONSE_MESSAGE = "No insights available."
FRONT_LOADING_SHARE = 0.40

PROMPT_TEMPLATE = """Act as a senior CFO and Strategic Analyst. Analyze this SBU budget hierarchy which includes detailed quarterly disbursements based on unit rates and quantities.

Hierarchy Context: {context}

Please provide:
1. A critical audit of the spend phasing across the 4 quarters.
2. Identification of any 'lumpy' spend or front-loading risks.
3. Strategic suggestions on unit cost optimization or activity alignment.

Format as professional Markdown. Be concise and hard-hitting."""


def build_insight_payload(plan: BudgetPlan) -> List[Dict[str, Any]]:
    """Summarise quarterly spend per goal and activity."""

    return [
        {
            "goal": goal.name,
            "activities": [
                {
                    "name": activity.name,
                    "quarterlySpend": {
                        key: sum(amount(item.quarter(key)) for item in activity.line_items)
                        for key in QUARTERS
                    },
                }
                for activity in goal.activities
            ],
        }
        for goal in plan.goals
    ]


def build_prompt(payload: List[Dict[str, Any]]) -> str:
    return PROMPT_TEMPLATE.format(context=json.dumps(payload, ensure_ascii=False))


class InsightsProvider(ABC):
    """Abstract base class for narrative review backends."""

    @abstractmethod
    def generate(self, prompt: str, payload: List[Dict[str, Any]]) -> str:
        """Return free text reviewing the budget described by ``payload``."""


class GeminiInsightsProvider(InsightsProvider):
    """Google Gemini backend using the ``google-genai`` client."""

    def __init__(
        self,
        model: str = "gemini-2.5-pro",
        temperature: float = 0.65,
        api_key: Optional[str] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.api_key = api_key if api_key is not None else os.getenv("GEMINI_API_KEY", "")
        self._client = None

    def _get_client(self):
        if self._client is None:
            if not self.api_key:
                raise RuntimeError("No Gemini API key configured")
            try:
                from google import genai
            except ImportError as exc:
                raise RuntimeError(
                    "google-genai package not installed. Run: pip install google-genai"
                ) from exc
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate(self, prompt: str, payload: List[Dict[str, Any]]) -> str:
        client = self._get_client()
        from google.genai import types

        response = client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(temperature=self.temperature),
        )
        return response.text or ""


class PhasingInsightsProvider(InsightsProvider):
    """Offline review of quarterly phasing, used when no model is configured."""

    def generate(self, prompt: str, payload: List[Dict[str, Any]]) -> str:
        quarters = dict.fromkeys(QUARTERS, 0.0)
        for goal in payload:
            for activity in goal["activities"]:
                for key in QUARTERS:
                    quarters[key] += activity["quarterlySpend"][key]
        total = sum(quarters.values())
        if total <= 0:
            return ""

        lines = ["## Spend phasing", ""]
        for key in QUARTERS:
            share = quarters[key] / total
            lines.append(f"- **{key.upper()}**: {quarters[key]:,.0f} ({share:.0%})")

        findings: List[str] = []
        peak = max(QUARTERS, key=lambda key: quarters[key])
        if quarters[peak] / total > FRONT_LOADING_SHARE:
            label = "Front-loading" if peak in ("q1", "q2") else "Back-loading"
            findings.append(
                f"- {label} risk: {peak.upper()} carries {quarters[peak] / total:.0%} of annual spend."
            )
        idle = [key.upper() for key in QUARTERS if quarters[key] == 0]
        if idle:
            findings.append(f"- No disbursement planned in {', '.join(idle)}.")

        lines.extend(["", "## Findings", ""])
        lines.extend(findings or ["- Spend is spread evenly across the year."])
        return "\n".join(lines)


def create_insights_provider(
    provider_name: Optional[str], config: Optional[InsightsConfig] = None
) -> InsightsProvider:
    """Instantiate a provider by name, falling back to the offline review."""

    config = config or InsightsConfig()
    provider_name = (provider_name or config.provider or "offline").lower()
    if provider_name == "gemini":
        return GeminiInsightsProvider(
            model=config.model,
            temperature=config.temperature,
            api_key=os.getenv(config.api_key_env, ""),
        )
    if provider_name in {"offline", "local", "fallback"}:
        return PhasingInsightsProvider()

    logger.warning(
        "Unknown insights provider '%s'; falling back to offline phasing review",
        provider_name,
    )
    return PhasingInsightsProvider()


def generate_insights(plan: BudgetPlan, provider: InsightsProvider) -> str:
    """Ask ``provider`` for a review of ``plan``."""

    if plan.is_empty:
        return ""

    payload = build_insight_payload(plan)
    prompt = build_prompt(payload)
    try:
        text = provider.generate(prompt, payload)
    except Exception:
        logger.exception("Insights provider %s failed", provider.__class__.__name__)
        return UNAVAILABLE_MESSAGE
    return text or EMPTY_RESPONSE_MESSAGE


__all__ = [
    "GeminiInsightsProvider",
    "InsightsProvider",
    "PhasingInsightsProvider",
    "build_insight_payload",
    "build_prompt",
    "create_insights_provider",
    "generate_insights",
]
