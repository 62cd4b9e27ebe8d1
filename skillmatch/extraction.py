from __future__ import annotations

import logging
import math
from typing import Optional

from skillmatch.experience import assess_experience_level, detect_job_level, estimate_years
from skillmatch.llm.extractor import SkillExtractor, SkillExtractorError
from skillmatch.models import (
    ExperienceLevel,
    ExtractionMethod,
    ExtractionResult,
    JobSkillProfile,
    ResumeSkillProfile,
)
from skillmatch.requirements import categorize_job_skills
from skillmatch.skills.extractor import extract_skills, extract_skills_with_confidence, skills_by_category
from skillmatch.skills.vocabulary import SkillVocabulary

logger = logging.getLogger(__name__)

# Dictionary output has no proficiency signal; the most confident share is
# reported as proficient, the rest as familiar.
PROFICIENT_SHARE = 0.6

_JOB_LEVELS = {
    "senior": ExperienceLevel.SENIOR,
    "entry": ExperienceLevel.JUNIOR,
    "mid": ExperienceLevel.MID,
}


def dictionary_resume_profile(resume_text: str, vocabulary: Optional[SkillVocabulary] = None) -> ResumeSkillProfile:
    ranked = [sc.skill for sc in extract_skills_with_confidence(resume_text, vocabulary=vocabulary)]
    cut = math.ceil(len(ranked) * PROFICIENT_SHARE)
    return ResumeSkillProfile(
        expert=(),
        proficient=tuple(ranked[:cut]),
        familiar=tuple(ranked[cut:]),
        skills_by_category=skills_by_category(sorted(ranked), vocabulary),
        experience_level=assess_experience_level(resume_text),
        years_of_experience=estimate_years(resume_text),
    )


def dictionary_job_profile(
        job_text: str,
        job_title: str = "",
        vocabulary: Optional[SkillVocabulary] = None,
) -> JobSkillProfile:
    skills = extract_skills(job_text, vocabulary=vocabulary)
    req = categorize_job_skills(job_text, skills, vocabulary)
    return JobSkillProfile(
        must_have=req.must_have,
        good_to_have=req.nice_to_have,
        skills_by_category=skills_by_category(skills, vocabulary),
        minimum_years=estimate_years(job_text),
        seniority_level=_JOB_LEVELS[detect_job_level(job_title, job_text)],
    )


def extract_resume_profile(
        resume_text: str,
        ai_extractor: Optional[SkillExtractor] = None,
        vocabulary: Optional[SkillVocabulary] = None,
) -> ExtractionResult:
    """
    AI extraction when an extractor is given, dictionary otherwise.
    An AI failure is not an error here: the dictionary result is returned
    tagged DICTIONARY_FALLBACK with the (sanitized) reason.
    """
    if ai_extractor is None:
        return ExtractionResult(ExtractionMethod.DICTIONARY, dictionary_resume_profile(resume_text, vocabulary))
    try:
        return ExtractionResult(ExtractionMethod.AI, ai_extractor.extract_resume(resume_text))
    except SkillExtractorError as e:
        logger.warning("AI resume extraction failed, using dictionary: %s", e)
        return ExtractionResult(
            ExtractionMethod.DICTIONARY_FALLBACK,
            dictionary_resume_profile(resume_text, vocabulary),
            error=str(e),
        )


def extract_job_profile(
        job_text: str,
        job_title: str = "",
        ai_extractor: Optional[SkillExtractor] = None,
        vocabulary: Optional[SkillVocabulary] = None,
) -> ExtractionResult:
    if ai_extractor is None:
        return ExtractionResult(ExtractionMethod.DICTIONARY, dictionary_job_profile(job_text, job_title, vocabulary))
    try:
        return ExtractionResult(ExtractionMethod.AI, ai_extractor.extract_job(job_text, job_title))
    except SkillExtractorError as e:
        logger.warning("AI job extraction failed, using dictionary: %s", e)
        return ExtractionResult(
            ExtractionMethod.DICTIONARY_FALLBACK,
            dictionary_job_profile(job_text, job_title, vocabulary),
            error=str(e),
        )
