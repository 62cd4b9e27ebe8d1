from __future__ import annotations

import math
from typing import Iterable, List, Optional

from skillmatch.requirements import JobRequirement
from skillmatch.skills.normalizer import normalize_skills
from skillmatch.skills.vocabulary import SkillVocabulary

from .matcher import skills_match
from .types import MatchResult, SkillWeights, WeightedMatchResult


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for non-negative input (round() would give banker's rounding)."""
    return int(math.floor(value + 0.5))


def calculate_match_percentage(matched: int, required: int) -> int:
    """100 when nothing is required: an empty requirement is trivially satisfied."""
    if required <= 0:
        return 100
    return round_half_up(100.0 * matched / required)


def _prepare(
        skills: Iterable[str],
        *,
        case_sensitive: bool,
        synonyms: bool,
        vocabulary: Optional[SkillVocabulary],
) -> List[str]:
    if isinstance(skills, str):
        skills = [skills]
    return normalize_skills(skills or [], vocabulary, case_sensitive=case_sensitive, synonyms=synonyms)


def compare_skills(
        resume_skills: Iterable[str],
        job_skills: Iterable[str],
        *,
        fuzzy: bool = True,
        case_sensitive: bool = False,
        synonyms: bool = True,
        vocabulary: Optional[SkillVocabulary] = None,
) -> MatchResult:
    """
    Compare a candidate's skills against one set of job skills.

    Both sides are normalized first. A job skill is matched by the first resume
    skill that skills_match() accepts, and is reported in its job spelling.
    Extra skills are resume skills that match no job skill at all.
    """
    resume = _prepare(resume_skills, case_sensitive=case_sensitive, synonyms=synonyms, vocabulary=vocabulary)
    job = _prepare(job_skills, case_sensitive=case_sensitive, synonyms=synonyms, vocabulary=vocabulary)

    matched: List[str] = []
    missing: List[str] = []
    for js in job:
        if any(skills_match(rs, js, fuzzy) for rs in resume):
            matched.append(js)
        else:
            missing.append(js)

    extra = [rs for rs in resume if not any(skills_match(rs, js, fuzzy) for js in job)]

    return MatchResult(
        matched_skills=sorted(matched),
        missing_skills=sorted(missing),
        extra_skills=sorted(extra),
        match_percentage=calculate_match_percentage(len(matched), len(job)),
        total_job_skills=len(job),
        total_resume_skills=len(resume),
    )


def compare_weighted(
        resume_skills: Iterable[str],
        requirement: JobRequirement,
        weights: Optional[SkillWeights] = None,
        *,
        fuzzy: bool = True,
        case_sensitive: bool = False,
        synonyms: bool = True,
        vocabulary: Optional[SkillVocabulary] = None,
) -> WeightedMatchResult:
    """
    Score must-have and nice-to-have skills separately, then combine:

        weighted = (must% * w_must + nice% * w_nice) / (w_must + w_nice)

    Each weight is applied once. Both categories are compared against the full
    resume set, so one resume skill may satisfy a skill in each. An empty
    category scores 100.
    """
    w = weights or SkillWeights()
    opts = dict(fuzzy=fuzzy, case_sensitive=case_sensitive, synonyms=synonyms, vocabulary=vocabulary)
    resume = list(resume_skills or [])

    must = compare_skills(resume, requirement.must_have, **opts)
    nice = compare_skills(resume, requirement.nice_to_have, **opts)
    overall = compare_skills(resume, requirement.all_skills, **opts)

    weighted = (must.match_percentage * w.must_have + nice.match_percentage * w.nice_to_have) / w.total

    return WeightedMatchResult(
        must_have=must,
        nice_to_have=nice,
        overall=overall,
        weighted_match_percentage=round_half_up(weighted),
        weights=w,
    )
