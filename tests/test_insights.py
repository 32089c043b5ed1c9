import json

from budgetplan.config import InsightsConfig
from budgetplan.insights import (
    EMPTY_RESPONSE_MESSAGE,
    UNAVAILABLE_MESSAGE,
    GeminiInsightsProvider,
    InsightsProvider,
    PhasingInsightsProvider,
    build_insight_payload,
    build_prompt,
    create_insights_provider,
    generate_insights,
)
from budgetplan.models import BudgetPlan


class RecordingProvider(InsightsProvider):
    def __init__(self, response="Looks fine"):
        self.response = response
        self.calls = []

    def generate(self, prompt, payload):
        self.calls.append((prompt, payload))
        return self.response


class FailingProvider(InsightsProvider):
    def generate(self, prompt, payload):
        raise ConnectionError("network down")


def test_payload_summarises_quarterly_spend_per_activity(sample_plan):
    payload = build_insight_payload(sample_plan)

    assert [entry["goal"] for entry in payload] == ["Academic Excellence", "Infrastructure"]
    faculty = payload[0]["activities"][0]
    assert faculty["name"] == "Faculty Development"
    assert faculty["quarterlySpend"] == {"q1": 200, "q2": 100, "q3": 200, "q4": 0}


def test_prompt_embeds_payload_as_json(sample_plan):
    payload = build_insight_payload(sample_plan)
    prompt = build_prompt(payload)

    assert json.dumps(payload, ensure_ascii=False) in prompt
    assert "front-loading" in prompt


def test_generate_insights_passes_payload_to_provider(sample_plan):
    provider = RecordingProvider()

    assert generate_insights(sample_plan, provider) == "Looks fine"
    assert len(provider.calls) == 1
    assert provider.calls[0][1] == build_insight_payload(sample_plan)


def test_generate_insights_skips_empty_plan():
    provider = RecordingProvider()

    assert generate_insights(BudgetPlan(), provider) == ""
    assert provider.calls == []


def test_generate_insights_handles_failures_and_blank_responses(sample_plan):
    assert generate_insights(sample_plan, FailingProvider()) == UNAVAILABLE_MESSAGE
    assert generate_insights(sample_plan, RecordingProvider(response="")) == EMPTY_RESPONSE_MESSAGE


def test_phasing_provider_flags_concentrated_quarter(sample_plan):
    text = generate_insights(sample_plan, PhasingInsightsProvider())

    assert "**Q1**: 1,200 (35%)" in text
    assert "Front-loading" not in text
    assert "evenly" in text


def test_phasing_provider_reports_front_loading_and_idle_quarters():
    payload = [{"goal": "G", "activities": [{"name": "A", "quarterlySpend": {"q1": 900, "q2": 100, "q3": 0, "q4": 0}}]}]
    text = PhasingInsightsProvider().generate("", payload)

    assert "Front-loading risk: Q1 carries 90%" in text
    assert "No disbursement planned in Q3, Q4." in text


def test_gemini_without_key_is_reported_as_unavailable(sample_plan, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    provider = create_insights_provider("gemini", InsightsConfig())

    assert isinstance(provider, GeminiInsightsProvider)
    assert generate_insights(sample_plan, provider) == UNAVAILABLE_MESSAGE


def test_unknown_provider_falls_back_to_offline():
    assert isinstance(create_insights_provider("mystery"), PhasingInsightsProvider)
    assert isinstance(create_insights_provider(None), PhasingInsightsProvider)
