import pytest

import skillmatch.llm.extractor as ex
from skillmatch.models import JobSkillProfile, ResumeSkillProfile


class _AlwaysFailExtractor:
    """
    Stand-in for LLMSkillExtractor that always fails.
    FailoverSkillExtractor instantiates LLMSkillExtractor from the module, so
    we monkeypatch ex.LLMSkillExtractor to this class in tests.
    """

    def __init__(self, *args, **kwargs):
        pass

    def extract_resume(self, *args, **kwargs):
        raise ex.SkillExtractorError("boom")

    def extract_job(self, *args, **kwargs):
        raise ex.SkillExtractorError("boom")


class _ProviderGatedExtractor:
    """Fails for openai, succeeds for anyone else. Records every construction."""

    built = []

    def __init__(self, *, api_key, provider, model, timeout_seconds=None, vocabulary=None):
        self.provider = provider
        _ProviderGatedExtractor.built.append((provider, model))

    def extract_resume(self, resume_text):
        if self.provider == "openai":
            raise ex.SkillExtractorError("openai API error: BadRequestError")
        return ResumeSkillProfile(expert=("python",))

    def extract_job(self, job_text, job_title=""):
        if self.provider == "openai":
            raise ex.SkillExtractorError("openai API error: BadRequestError")
        return JobSkillProfile(must_have=("python",))


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    # No sleeping during tests even if retry/backoff kicks in
    monkeypatch.setattr(ex, "_sleep_backoff", lambda attempt: None)


def test_failover_circuit_breaker_trips_after_n_consecutive_failures(monkeypatch):
    monkeypatch.setattr(ex, "LLMSkillExtractor", _AlwaysFailExtractor)

    f = ex.FailoverSkillExtractor(
        api_key_resolver=lambda provider: "dummy",
        candidates=[
            ("openai", "gpt-4o-mini"),
            ("anthropic", "claude-sonnet-4-6"),
            ("openrouter", "openai/gpt-4o-mini"),
        ],
        max_retries=0,
        breaker_consecutive_fails=2,
    )

    # First call: tries candidates until it accumulates failures
    with pytest.raises(ex.SkillExtractorError):
        f.extract_resume("Python developer")

    # Second call: breaker is open and raises immediately
    with pytest.raises(ex.SkillExtractorError) as e:
        f.extract_job("We need Python.")

    assert "disabled" in str(e.value).lower()
    assert f.is_disabled() is True


def test_failover_moves_to_next_candidate_and_sticks(monkeypatch):
    _ProviderGatedExtractor.built = []
    monkeypatch.setattr(ex, "LLMSkillExtractor", _ProviderGatedExtractor)

    f = ex.FailoverSkillExtractor(
        api_key_resolver=lambda provider: "dummy",
        candidates=[("openai", "gpt-4o-mini"), ("anthropic", "claude-sonnet-4-6")],
        max_retries=0,
        breaker_consecutive_fails=5,
    )

    assert f.extract_resume("Python").expert == ("python",)
    assert f.extract_job("Python").must_have == ("python",)

    # second call went straight to the candidate that worked
    assert _ProviderGatedExtractor.built == [
        ("openai", "gpt-4o-mini"),
        ("anthropic", "claude-sonnet-4-6"),
        ("anthropic", "claude-sonnet-4-6"),
    ]
    assert f.is_disabled() is False


def test_transient_errors_are_retried(monkeypatch):
    calls = {"n": 0}

    class _FlakyExtractor:
        def __init__(self, *args, **kwargs):
            pass

        def extract_resume(self, resume_text):
            calls["n"] += 1
            if calls["n"] == 1:
                raise ex.SkillExtractorError("openai API error: rate limit")
            return ResumeSkillProfile(familiar=("go",))

    monkeypatch.setattr(ex, "LLMSkillExtractor", _FlakyExtractor)

    f = ex.FailoverSkillExtractor(
        api_key_resolver=lambda provider: "dummy",
        candidates=[("openai", "gpt-4o-mini")],
        max_retries=1,
        breaker_consecutive_fails=2,
    )

    assert f.extract_resume("Go").familiar == ("go",)
    assert calls["n"] == 2


def test_non_transient_errors_are_not_retried(monkeypatch):
    calls = {"n": 0}

    class _BrokenExtractor:
        def __init__(self, *args, **kwargs):
            pass

        def extract_resume(self, resume_text):
            calls["n"] += 1
            raise ex.SkillExtractorError("LLM returned non-JSON output.")

    monkeypatch.setattr(ex, "LLMSkillExtractor", _BrokenExtractor)

    f = ex.FailoverSkillExtractor(
        api_key_resolver=lambda provider: "dummy",
        candidates=[("openai", "gpt-4o-mini")],
        max_retries=3,
        breaker_consecutive_fails=5,
    )

    with pytest.raises(ex.SkillExtractorError, match="non-JSON"):
        f.extract_resume("Go")
    assert calls["n"] == 1


def test_candidates_without_keys_are_skipped_without_tripping_breaker():
    f = ex.FailoverSkillExtractor(
        api_key_resolver=lambda provider: None,
        candidates=[("openai", "gpt-4o-mini"), ("anthropic", "claude-sonnet-4-6")],
        max_retries=0,
        breaker_consecutive_fails=1,
    )

    with pytest.raises(ex.SkillExtractorError, match="Missing API key"):
        f.extract_resume("Python")
    assert f.is_disabled() is False


def test_empty_chain_raises():
    f = ex.FailoverSkillExtractor(api_key_resolver=lambda provider: "dummy", candidates=[])
    with pytest.raises(ex.SkillExtractorError, match="no candidates"):
        f.extract_resume("Python")


def test_from_config_reads_chain(monkeypatch):
    monkeypatch.setenv("SKILLMATCH_LLM_CHAIN", "anthropic/claude-sonnet-4-6,gpt-4o-mini")
    monkeypatch.setenv("SKILLMATCH_LLM_MAX_RETRIES", "0")
    _ProviderGatedExtractor.built = []
    monkeypatch.setattr(ex, "LLMSkillExtractor", _ProviderGatedExtractor)

    f = ex.FailoverSkillExtractor.from_config()
    f.extract_resume("Python")

    assert _ProviderGatedExtractor.built == [("anthropic", "claude-sonnet-4-6")]
