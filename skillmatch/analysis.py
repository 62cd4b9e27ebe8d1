from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from skillmatch.cache_keys import compute_cache_key
from skillmatch.extraction import extract_job_profile, extract_resume_profile
from skillmatch.llm.extractor import SkillExtractor
from skillmatch.matching.engine import compare_weighted
from skillmatch.matching.types import SkillWeights
from skillmatch.models import JobPosting, JobSkillProfile, ResumeIdentity, ResumeSkillProfile
from skillmatch.profile import AddedSkillsRepository
from skillmatch.report import build_payload
from skillmatch.requirements import JobRequirement
from skillmatch.skills.vocabulary import SkillVocabulary, default_vocabulary
from skillmatch.store import AnalysisStore

logger = logging.getLogger(__name__)


class InsufficientInputError(ValueError):
    """The request carries no usable resume text or job description (distinct from a 0% match)."""


@dataclass(frozen=True)
class AnalysisOutcome:
    payload: Dict[str, Any]
    from_cache: bool
    cache_key: str
    # False when the result could not be persisted (the result itself is still valid)
    saved: bool = False
    cached_at: Optional[datetime] = None
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analysis": self.payload,
            "isFromCache": self.from_cache,
            "cacheKey": self.cache_key,
            "saved": self.saved,
            "cacheTimestamp": self.cached_at.isoformat() if self.cached_at else None,
            "durationMs": self.duration_ms,
        }


class AnalysisService:
    """
    Cache-aware resume-vs-job analysis.

    Flow: cache lookup (unless forced) -> extraction (AI or dictionary, with
    fallback) -> added skills merged into the resume side -> weighted match ->
    payload -> save. The save runs only after the whole payload exists, so an
    aborted analysis never leaves a partial record, and a failed save never
    fails the analysis.
    """

    def __init__(
            self,
            store: AnalysisStore,
            *,
            ai_extractor: Optional[SkillExtractor] = None,
            added_skills: Optional[AddedSkillsRepository] = None,
            vocabulary: Optional[SkillVocabulary] = None,
            weights: Optional[SkillWeights] = None,
    ) -> None:
        self._store = store
        self._ai = ai_extractor
        self._added = added_skills
        self._vocab = vocabulary or default_vocabulary()
        self._weights = weights or SkillWeights()

    def _added_skills(self) -> List[str]:
        if self._added is None:
            return []
        return self._added.skills()

    def analyze(
            self,
            job: JobPosting,
            resume_text: str,
            resume_identity: Optional[ResumeIdentity] = None,
            *,
            force: bool = False,
    ) -> AnalysisOutcome:
        """
        Raises InsufficientInputError when the resume text or job description is blank.
        With force=True the cache is not consulted and the stored record is overwritten.
        """
        if not (resume_text or "").strip():
            raise InsufficientInputError("Resume content is empty or could not be processed.")
        if not (job.description or "").strip():
            raise InsufficientInputError("Job description is empty.")

        started = time.monotonic()
        key = compute_cache_key(job.url, resume_identity, job.description)

        if not force:
            cached = self._store.load(job.url, resume_identity, job.description)
            if cached is not None:
                logger.info("Cache hit for %s", key)
                return AnalysisOutcome(
                    payload=cached.analysis_data,
                    from_cache=True,
                    cache_key=key,
                    saved=True,
                    cached_at=cached.saved_at,
                )
        else:
            logger.info("Forced re-analysis for %s", key)

        resume_ex = extract_resume_profile(resume_text, self._ai, self._vocab)
        job_ex = extract_job_profile(job.description, job.title, self._ai, self._vocab)
        resume_profile: ResumeSkillProfile = resume_ex.data  # type: ignore[assignment]
        job_profile: JobSkillProfile = job_ex.data  # type: ignore[assignment]

        added = self._added_skills()
        resume_skills = resume_profile.all_skills + added
        requirement = JobRequirement.build(job_profile.must_have, job_profile.good_to_have, self._vocab)

        result = compare_weighted(resume_skills, requirement, self._weights, vocabulary=self._vocab)
        payload = build_payload(
            result,
            job,
            resume_ex,
            job_ex,
            ai_enabled=self._ai is not None,
            added_skills=added,
            resume_identity=resume_identity,
        )

        saved = self._store.save(job.url, payload, resume_identity, job.description)
        if not saved:
            logger.warning("Analysis for %s computed but not cached", job.url)

        return AnalysisOutcome(
            payload=payload,
            from_cache=False,
            cache_key=key,
            saved=saved,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
