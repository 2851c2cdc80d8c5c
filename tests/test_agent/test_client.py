"""Tests for the recognition service client: parsing, fallbacks, errors."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from autofix.agent.client import (
    LLMCollaborator,
    PartGuess,
    parse_part_guess,
    parse_quotes,
)
from autofix.agent.prompts import QUOTES_PROMPT, SUMMARY_PROMPT
from autofix.database.models import QuoteCandidate
from autofix.utils.constants import UNKNOWN_PART_NAME
from autofix.workflow.errors import CollaboratorFailure


def _response(text):
    message = SimpleNamespace(content=text)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _collaborator(*answers):
    client = MagicMock()
    client.chat.completions.create.side_effect = [
        _response(a) for a in answers
    ]
    return LLMCollaborator(client=client, model="test-model"), client


def _connection_error():
    request = httpx.Request("POST", "http://localhost:1234/v1/chat/completions")
    return openai.APIConnectionError(request=request)


class TestPrompts:
    def test_quotes_prompt_formats(self):
        text = QUOTES_PROMPT.format(part_name="Alternator")
        assert "Alternator" in text

    def test_summary_prompt_formats(self):
        assert "swapped pads" in SUMMARY_PROMPT.format(transcript="swapped pads")


class TestParsePartGuess:
    def test_valid(self):
        guess = parse_part_guess('{"name": "Side Mirror", "estimatedPrice": 85}')
        assert guess == PartGuess(name="Side Mirror", estimated_price=85.0)

    def test_fenced_json(self):
        text = '```json\n{"name": "Radiator", "estimatedPrice": 140.5}\n```'
        assert parse_part_guess(text).name == "Radiator"

    @pytest.mark.parametrize("text", [
        "not json",
        '{"estimatedPrice": 10}',
        '{"name": "Hose", "estimatedPrice": -3}',
        '{"name": "  ", "estimatedPrice": 3}',
        "[]",
    ])
    def test_fallback(self, text):
        guess = parse_part_guess(text)
        assert guess == PartGuess(name=UNKNOWN_PART_NAME, estimated_price=0.0)


class TestParseQuotes:
    def test_valid_list(self):
        text = json.dumps([
            {"source": "AutoZone", "price": 120, "laborEstimate": 80},
            {"source": "NAPA", "price": 110.5, "laborEstimate": 90},
        ])
        assert parse_quotes(text) == [
            QuoteCandidate(source="AutoZone", price=120.0, labor_estimate=80.0),
            QuoteCandidate(source="NAPA", price=110.5, labor_estimate=90.0),
        ]

    def test_object_with_quotes_key(self):
        text = json.dumps({"quotes": [
            {"source": "eBay", "price": 60, "laborEstimate": 40},
        ]})
        assert [q.source for q in parse_quotes(text)] == ["eBay"]

    def test_drops_malformed_entries(self):
        text = json.dumps([
            {"source": "AutoZone", "price": 120, "laborEstimate": 80},
            {"source": "", "price": 1, "laborEstimate": 1},
            {"source": "NAPA", "price": "cheap", "laborEstimate": 1},
            {"price": 5, "laborEstimate": 1},
            "garbage",
        ])
        assert [q.source for q in parse_quotes(text)] == ["AutoZone"]

    @pytest.mark.parametrize("text", ["", "nope", "42", '"text"'])
    def test_unusable_is_empty(self, text):
        assert parse_quotes(text) == []


class TestLLMCollaborator:
    def test_recognize_plate_strips_quotes(self):
        collab, client = _collaborator('"ABC-1234"\n')
        assert collab.recognize_plate(b"img") == "ABC-1234"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        content = kwargs["messages"][0]["content"]
        assert content[1]["image_url"]["url"].startswith(
            "data:image/jpeg;base64,"
        )

    def test_identify_part(self):
        collab, _ = _collaborator('{"name": "Headlight", "estimatedPrice": 75}')
        assert collab.identify_part(b"img").name == "Headlight"

    def test_simulate_quotes_sends_part_name(self):
        collab, client = _collaborator(
            '[{"source": "NAPA", "price": 30, "laborEstimate": 20}]'
        )
        assert len(collab.simulate_quotes("Wiper Motor")) == 1
        prompt = client.chat.completions.create.call_args.kwargs[
            "messages"][0]["content"]
        assert "Wiper Motor" in prompt

    def test_summarize(self):
        collab, _ = _collaborator("Replaced the worn front brake pads.")
        assert collab.summarize_job("did pads") == (
            "Replaced the worn front brake pads."
        )

    def test_summarize_empty_answer_keeps_transcript(self):
        collab, _ = _collaborator("")
        assert collab.summarize_job("did pads") == "did pads"

    def test_summarize_blank_transcript_skips_call(self):
        collab, client = _collaborator()
        assert collab.summarize_job("  ") == "  "
        client.chat.completions.create.assert_not_called()

    def test_summarize_transport_error_keeps_transcript(self):
        collab, client = _collaborator()
        client.chat.completions.create.side_effect = _connection_error()
        assert collab.summarize_job("did pads") == "did pads"

    def test_transport_error_raises_collaborator_failure(self):
        collab, client = _collaborator()
        client.chat.completions.create.side_effect = _connection_error()
        with pytest.raises(CollaboratorFailure):
            collab.identify_part(b"img")

    def test_no_choices(self):
        client = MagicMock()
        client.chat.completions.create.return_value = SimpleNamespace(
            choices=[]
        )
        with pytest.raises(CollaboratorFailure, match="no choices"):
            LLMCollaborator(client=client).recognize_plate(b"img")

    def test_is_connected(self):
        collab, client = _collaborator()
        assert collab.is_connected()
        client.models.list.side_effect = _connection_error()
        assert not collab.is_connected()

    def test_default_client_uses_config(self):
        collab = LLMCollaborator()
        assert isinstance(collab.client, openai.OpenAI)
