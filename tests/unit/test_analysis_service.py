"""
tests/unit/test_analysis_service.py

End-to-end analysis flow against a tmp_path store. No network: the AI side is
either absent or a stub.
"""
from __future__ import annotations

from dataclasses import replace

import pytest

from skillmatch.analysis import AnalysisService, InsufficientInputError
from skillmatch.llm.extractor import SkillExtractorError
from skillmatch.matching.types import SkillWeights
from skillmatch.models import ExperienceLevel, JobSkillProfile, ResumeSkillProfile
from skillmatch.profile import AddedSkillsRepository
from skillmatch.store import JsonAnalysisStore


class _StubExtractor:
    def extract_resume(self, resume_text):
        return ResumeSkillProfile(
            expert=("python",),
            proficient=("docker",),
            experience_level=ExperienceLevel.SENIOR,
            years_of_experience=8,
        )

    def extract_job(self, job_text, job_title=""):
        return JobSkillProfile(
            must_have=("python",),
            good_to_have=("kubernetes",),
            minimum_years=5,
            seniority_level=ExperienceLevel.SENIOR,
        )


class _FailingExtractor:
    def extract_resume(self, resume_text):
        raise SkillExtractorError("openai API timed out after 30 seconds.")

    def extract_job(self, job_text, job_title=""):
        raise SkillExtractorError("openai API timed out after 30 seconds.")


class _ReadOnlyStore:
    """Never has anything cached and refuses every write."""

    def __init__(self):
        self.save_calls = 0

    def load(self, url, resume_identity=None, job_description=None):
        return None

    def save(self, url, payload, resume_identity=None, job_description=None):
        self.save_calls += 1
        return False


# ---------------------------------------------------------------------------
# Cache behaviour
# ---------------------------------------------------------------------------

def test_fresh_analysis_is_saved_then_served_from_cache(tmp_path, sample_job, sample_identity, load_text):
    service = AnalysisService(JsonAnalysisStore(tmp_path))
    resume = load_text("sample_resume.txt")

    first = service.analyze(sample_job, resume, sample_identity)
    assert first.from_cache is False
    assert first.saved is True
    assert first.payload["weightedMatchPercentage"] == 70
    assert first.payload["mustHaveMatchPercentage"] == 100
    assert first.payload["niceToHaveMatchPercentage"] == 0
    assert first.payload["mustHave"]["matched"] == ["postgresql", "react", "typescript"]
    assert first.payload["niceToHave"]["missing"] == ["docker"]
    assert first.payload["matchCategory"] == "good"

    second = service.analyze(sample_job, resume, sample_identity)
    assert second.from_cache is True
    assert second.payload == first.payload
    assert second.cache_key == first.cache_key
    assert second.cached_at is not None


def test_force_bypasses_and_overwrites_cache(tmp_path, sample_job, sample_identity, load_text):
    store = JsonAnalysisStore(tmp_path)
    service = AnalysisService(store)
    resume = load_text("sample_resume.txt")

    service.analyze(sample_job, resume, sample_identity)
    forced = service.analyze(sample_job, resume, sample_identity, force=True)

    assert forced.from_cache is False
    assert forced.saved is True
    assert len(store.list_all()) == 1


def test_edited_description_is_analyzed_again(tmp_path, sample_job, sample_identity, load_text):
    service = AnalysisService(JsonAnalysisStore(tmp_path))
    resume = load_text("sample_resume.txt")

    service.analyze(sample_job, resume, sample_identity)
    edited = replace(sample_job, description=sample_job.description + "\nKubernetes is a plus.")
    outcome = service.analyze(edited, resume, sample_identity)

    assert outcome.from_cache is False
    assert "kubernetes" in outcome.payload["niceToHave"]["missing"]


def test_save_failure_still_returns_the_analysis(sample_job, load_text):
    store = _ReadOnlyStore()
    outcome = AnalysisService(store).analyze(sample_job, load_text("sample_resume.txt"))

    assert store.save_calls == 1
    assert outcome.saved is False
    assert outcome.from_cache is False
    assert outcome.payload["weightedMatchPercentage"] == 70


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("resume_text", ["", "   \n\t"])
def test_blank_resume_is_insufficient_input(tmp_path, sample_job, resume_text):
    with pytest.raises(InsufficientInputError):
        AnalysisService(JsonAnalysisStore(tmp_path)).analyze(sample_job, resume_text)


def test_blank_description_is_insufficient_input(tmp_path, sample_job, load_text):
    job = replace(sample_job, description="  ")
    with pytest.raises(ValueError):
        AnalysisService(JsonAnalysisStore(tmp_path)).analyze(job, load_text("sample_resume.txt"))


def test_insufficient_input_writes_nothing(tmp_path, sample_job):
    store = JsonAnalysisStore(tmp_path)
    with pytest.raises(InsufficientInputError):
        AnalysisService(store).analyze(sample_job, "")
    assert store.list_all() == []


# ---------------------------------------------------------------------------
# Added skills, weights, AI provenance
# ---------------------------------------------------------------------------

def test_added_skills_count_toward_the_match(tmp_path, sample_job, load_text):
    added = AddedSkillsRepository(tmp_path)
    added.add("Docker")
    service = AnalysisService(JsonAnalysisStore(tmp_path), added_skills=added)

    outcome = service.analyze(sample_job, load_text("sample_resume.txt"))

    assert outcome.payload["weightedMatchPercentage"] == 100
    assert outcome.payload["metadata"]["addedSkills"] == ["docker"]


def test_custom_weights(tmp_path, sample_job, load_text):
    service = AnalysisService(JsonAnalysisStore(tmp_path), weights=SkillWeights(must_have=0.5, nice_to_have=0.5))
    outcome = service.analyze(sample_job, load_text("sample_resume.txt"))
    assert outcome.payload["weightedMatchPercentage"] == 50
    assert outcome.payload["report"]["scoring"]["weights"] == {"mustHave": 0.5, "niceToHave": 0.5}


def test_ai_extraction_metadata(tmp_path, sample_job, load_text):
    service = AnalysisService(JsonAnalysisStore(tmp_path), ai_extractor=_StubExtractor())
    payload = service.analyze(sample_job, load_text("sample_resume.txt")).payload

    meta = payload["metadata"]
    assert meta["analysisMethod"] == "ai"
    assert meta["aiEnabled"] is True
    assert meta["aiUsed"] is True
    assert "fallbackReasons" not in meta
    assert payload["mustHave"]["matched"] == ["python"]
    assert payload["report"]["experienceAlignment"]["assessment"] == "excellent"


def test_ai_failure_is_recorded_as_fallback(tmp_path, sample_job, load_text):
    service = AnalysisService(JsonAnalysisStore(tmp_path), ai_extractor=_FailingExtractor())
    payload = service.analyze(sample_job, load_text("sample_resume.txt")).payload

    meta = payload["metadata"]
    assert meta["analysisMethod"] == "dictionary_fallback"
    assert meta["aiEnabled"] is True
    assert meta["aiUsed"] is False
    assert meta["fallbackReasons"] == ["openai API timed out after 30 seconds."] * 2
    assert payload["weightedMatchPercentage"] == 70


def test_payload_envelope(tmp_path, sample_job, sample_identity, load_text):
    outcome = AnalysisService(JsonAnalysisStore(tmp_path)).analyze(
        sample_job, load_text("sample_resume.txt"), sample_identity
    )
    payload = outcome.payload

    assert payload["context"]["job"] == {
        "url": sample_job.url,
        "title": "Senior Engineer",
        "company": "Example Co",
        "level": "senior",
    }
    assert payload["context"]["resume"]["experience"] == "senior"
    assert payload["metadata"]["analysisMethod"] == "dictionary"
    assert payload["metadata"]["aiEnabled"] is False
    assert payload["metadata"]["resumeInfo"] == {"filename": "resume.pdf", "fileSize": 2048}
    assert payload["matchPercentage"] == 75
    assert "git" in payload["extraSkills"]

    d = outcome.to_dict()
    assert d["analysis"] is payload
    assert d["isFromCache"] is False
    assert d["cacheKey"] == outcome.cache_key
    assert d["cacheTimestamp"] is None
    assert d["durationMs"] >= 0
