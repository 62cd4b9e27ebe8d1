"""
tests/unit/test_llm_extractor.py

Tests for LLMSkillExtractor and its response parsing. All LLM calls are mocked.
No network, no API keys required.
"""
import json

import pytest
from unittest.mock import MagicMock, patch

from skillmatch import config
from skillmatch.llm.extractor import (
    LLMSkillExtractor,
    SkillExtractorError,
    clean_skill_names,
    job_profile_from_json,
    parse_json_object,
    resume_profile_from_json,
)
from skillmatch.llm.prompt import build_job_prompt, build_resume_prompt
from skillmatch.models import ExperienceLevel


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------

def _resume_json() -> dict:
    return {
        "technical_skills": {
            "expert": ["Python", "JS"],
            "proficient": ["React.js", "python"],
            "familiar": ["Docker!"],
        },
        "skills_by_category": {"programming_languages": ["Python", "JavaScript"]},
        "experience_level": "Senior",
        "years_of_experience": "6",
        "certifications": ["AWS SAA"],
        "education": "bachelor",
    }


def _job_json() -> dict:
    return {
        "must_have_skills": ["Kubernetes", "Go"],
        "good_to_have_skills": ["k8s", "Terraform"],
        "experience_requirements": {"minimum_years": 5, "preferred_years": 7, "seniority_level": "senior"},
    }


def _openai_response(content):
    mock_message = MagicMock()
    mock_message.content = content
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_response = MagicMock()
    mock_response.choices = [mock_choice]
    return mock_response


def _anthropic_message(text):
    mock_block = MagicMock()
    mock_block.type = "text"
    mock_block.text = text
    mock_message = MagicMock()
    mock_message.content = [mock_block]
    return mock_message


# ------------------------------------------------------------------
# OpenAI-compatible path
# ------------------------------------------------------------------

def test_openai_resume_extraction_is_cleaned_and_canonicalized():
    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = _openai_response(json.dumps(_resume_json()))

    with patch("skillmatch.llm.extractor.openai") as mock_openai:
        mock_openai.OpenAI.return_value = mock_client
        mock_openai.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_openai.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key="sk-fake", provider="openai", model="gpt-4o-mini")
        profile = extractor.extract_resume("Senior engineer, Python and React.")

    assert profile.expert == ("python", "javascript")
    assert profile.proficient == ("react",)
    assert profile.familiar == ("docker",)
    assert profile.experience_level == ExperienceLevel.SENIOR
    assert profile.years_of_experience == 6.0
    assert profile.skills_by_category["programming_languages"] == ["python", "javascript"]
    assert profile.certifications == ("AWS SAA",)

    kwargs = mock_client.chat.completions.create.call_args.kwargs
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["messages"][0]["role"] == "system"


def test_openrouter_uses_base_url():
    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = _openai_response(json.dumps(_job_json()))

    with patch("skillmatch.llm.extractor.openai") as mock_openai:
        mock_openai.OpenAI.return_value = mock_client
        mock_openai.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_openai.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key="sk-or-fake", provider="openrouter", model="openai/gpt-4o-mini")
        extractor.extract_job("We need Kubernetes.", "Platform Engineer")

    assert mock_openai.OpenAI.call_args.kwargs["base_url"] == config.OPENROUTER_BASE_URL


def test_ollama_needs_no_key(monkeypatch):
    monkeypatch.setenv("OLLAMA_BASE_URL", "http://gpu-box:11434/")
    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = _openai_response(json.dumps(_job_json()))

    with patch("skillmatch.llm.extractor.openai") as mock_openai:
        mock_openai.OpenAI.return_value = mock_client
        mock_openai.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_openai.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key=None, provider="ollama", model="llama3")
        profile = extractor.extract_job("We need Kubernetes.")

    assert mock_openai.OpenAI.call_args.kwargs["base_url"] == "http://gpu-box:11434/v1"
    assert profile.must_have == ("kubernetes", "go")


def test_openai_timeout_raises_extractor_error():
    class FakeTimeoutError(Exception):
        pass

    mock_client = MagicMock()
    mock_client.chat.completions.create.side_effect = FakeTimeoutError("timeout")

    with patch("skillmatch.llm.extractor.openai") as mock_openai:
        mock_openai.OpenAI.return_value = mock_client
        mock_openai.APITimeoutError = FakeTimeoutError
        mock_openai.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key="sk-fake", provider="openai", timeout_seconds=7)
        with pytest.raises(SkillExtractorError, match="timed out after 7 seconds"):
            extractor.extract_resume("Python")


def test_openai_empty_content_raises():
    mock_client = MagicMock()
    mock_client.chat.completions.create.return_value = _openai_response(None)

    with patch("skillmatch.llm.extractor.openai") as mock_openai:
        mock_openai.OpenAI.return_value = mock_client
        mock_openai.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_openai.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key="sk-fake", provider="openai")
        with pytest.raises(SkillExtractorError, match="empty content"):
            extractor.extract_resume("Python")


# ------------------------------------------------------------------
# Anthropic path
# ------------------------------------------------------------------

def test_anthropic_job_extraction_tolerates_code_fences():
    fenced = "```json\n" + json.dumps(_job_json()) + "\n```"
    mock_client = MagicMock()
    mock_client.messages.create.return_value = _anthropic_message(fenced)

    with patch("skillmatch.llm.extractor.anthropic") as mock_anthropic:
        mock_anthropic.Anthropic.return_value = mock_client
        mock_anthropic.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_anthropic.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key="sk-ant-fake", provider="anthropic", model="claude-sonnet-4-6")
        profile = extractor.extract_job("Go + Kubernetes, Terraform a plus.", "SRE")

    assert profile.must_have == ("kubernetes", "go")
    # "k8s" canonicalizes to a must-have skill and is dropped from the nice side
    assert profile.good_to_have == ("terraform",)
    assert profile.minimum_years == 5.0
    assert profile.seniority_level == ExperienceLevel.SENIOR
    mock_client.messages.create.assert_called_once()
    assert mock_client.messages.create.call_args.kwargs["system"]


def test_anthropic_non_json_reply_raises():
    mock_client = MagicMock()
    mock_client.messages.create.return_value = _anthropic_message("Sure! Here are the skills: Python")

    with patch("skillmatch.llm.extractor.anthropic") as mock_anthropic:
        mock_anthropic.Anthropic.return_value = mock_client
        mock_anthropic.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_anthropic.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key="sk-ant-fake", provider="anthropic")
        with pytest.raises(SkillExtractorError, match="non-JSON"):
            extractor.extract_resume("Python")


def test_anthropic_missing_text_block_raises():
    mock_block = MagicMock()
    mock_block.type = "tool_use"
    mock_message = MagicMock()
    mock_message.content = [mock_block]
    mock_client = MagicMock()
    mock_client.messages.create.return_value = mock_message

    with patch("skillmatch.llm.extractor.anthropic") as mock_anthropic:
        mock_anthropic.Anthropic.return_value = mock_client
        mock_anthropic.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_anthropic.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key="sk-ant-fake", provider="anthropic")
        with pytest.raises(SkillExtractorError, match="no text content"):
            extractor.extract_job("Python")


def test_missing_sdk_raises_extractor_error():
    with patch("skillmatch.llm.extractor.anthropic", None):
        extractor = LLMSkillExtractor(api_key="sk-ant-fake", provider="anthropic")
        with pytest.raises(SkillExtractorError, match="not installed"):
            extractor.extract_resume("Python")


# ------------------------------------------------------------------
# Construction + key hygiene
# ------------------------------------------------------------------

def test_missing_key_raises_for_hosted_providers():
    with pytest.raises(SkillExtractorError, match="Missing API key"):
        LLMSkillExtractor(api_key=None, provider="openai")


def test_unknown_provider_raises():
    with pytest.raises(SkillExtractorError, match="Unsupported provider"):
        LLMSkillExtractor(api_key="sk-fake", provider="cohere")


def test_api_key_never_appears_in_error_message():
    sentinel = "sk-SECURITY-TEST-SENTINEL-XYZ"
    mock_client = MagicMock()
    mock_client.chat.completions.create.side_effect = RuntimeError(f"bad key {sentinel}")

    with patch("skillmatch.llm.extractor.openai") as mock_openai:
        mock_openai.OpenAI.return_value = mock_client
        mock_openai.APITimeoutError = type("FakeTimeout", (Exception,), {})
        mock_openai.APIError = type("FakeAPIError", (Exception,), {})

        extractor = LLMSkillExtractor(api_key=sentinel, provider="openai")
        with pytest.raises(SkillExtractorError) as e:
            extractor.extract_resume("Python")

    assert sentinel not in str(e.value)
    assert e.value.__cause__ is None


# ------------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------------

def test_clean_skill_names():
    raw = ["C++", "C#", "Node.js", "a", "  Spring   Boot ", 5, "python", "Python", "Docker!"]
    assert clean_skill_names(raw) == ["c++", "c#", "node.js", "spring boot", "python", "docker"]
    assert clean_skill_names("python") == []


@pytest.mark.parametrize("raw", ["", "   ", "not json", "[1, 2]", "```json\n```"])
def test_parse_json_object_rejects_bad_replies(raw):
    with pytest.raises(SkillExtractorError):
        parse_json_object(raw)


def test_parse_json_object_accepts_fenced_object():
    assert parse_json_object('```\n{"a": 1}\n```') == {"a": 1}


def test_resume_json_without_technical_skills_is_rejected():
    with pytest.raises(SkillExtractorError):
        resume_profile_from_json({"skills": ["python"]})


def test_job_json_without_skill_lists_is_rejected():
    with pytest.raises(SkillExtractorError):
        job_profile_from_json({"requirements": "python"})


def test_unknown_levels_and_bad_numbers_degrade_gracefully():
    profile = resume_profile_from_json(
        {"technical_skills": {"expert": ["Rust"]}, "experience_level": "wizard", "years_of_experience": "lots"}
    )
    assert profile.expert == ("rust",)
    assert profile.experience_level == ExperienceLevel.UNKNOWN
    assert profile.years_of_experience == 0.0


# ------------------------------------------------------------------
# Prompts
# ------------------------------------------------------------------

def test_long_input_is_clipped_in_prompt():
    text = "x" * (config.AI_MAX_INPUT_CHARS + 500)
    prompt = build_resume_prompt(text)
    assert "x" * config.AI_MAX_INPUT_CHARS in prompt
    assert "x" * (config.AI_MAX_INPUT_CHARS + 1) not in prompt
    assert "[truncated]" in prompt


def test_job_prompt_includes_title():
    prompt = build_job_prompt("We need Go.", "Platform Engineer")
    assert "Platform Engineer" in prompt
    assert "We need Go." in prompt
