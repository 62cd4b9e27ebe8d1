from __future__ import annotations

import re
from typing import Any, Dict, Optional, Union

from skillmatch.models import ExperienceLevel

_SENIOR_INDICATORS = ("senior", "lead", "principal", "architect", "manager", "director")
_MID_INDICATORS = ("5+ years", "5 years", "6 years", "7 years", "8 years", "9 years")
_JUNIOR_INDICATORS = ("junior", "entry level", "graduate", "intern", "recent graduate")

_YEARS_RE = re.compile(r"\b\d+\+?\s*years?\b")

# Ordinal ranks; unknown sits with mid so a missing level is neither a bonus nor a penalty.
_LEVEL_RANK = {
    ExperienceLevel.JUNIOR: 1,
    ExperienceLevel.MID: 2,
    ExperienceLevel.SENIOR: 3,
    ExperienceLevel.EXPERT: 4,
    ExperienceLevel.UNKNOWN: 2,
}


def detect_job_level(title: str = "", description: str = "") -> str:
    """'senior', 'entry' or 'mid' (the default when nothing points elsewhere)."""
    text = f"{title or ''} {description or ''}".lower()
    if any(w in text for w in ("senior", "lead", "principal")):
        return "senior"
    if any(w in text for w in ("junior", "entry", "graduate")):
        return "entry"
    return "mid"


def assess_experience_level(resume_text: str) -> ExperienceLevel:
    """Keyword scan of the resume; first matching tier (senior, mid, junior) wins."""
    text = (resume_text or "").lower()
    if any(i in text for i in _SENIOR_INDICATORS):
        return ExperienceLevel.SENIOR
    if any(i in text for i in _MID_INDICATORS):
        return ExperienceLevel.MID
    if any(i in text for i in _JUNIOR_INDICATORS):
        return ExperienceLevel.JUNIOR
    return ExperienceLevel.UNKNOWN


def estimate_years(text: str) -> float:
    """Largest "N years" / "N+ years" figure mentioned, 0 when none."""
    best = 0.0
    for m in _YEARS_RE.finditer((text or "").lower()):
        digits = re.match(r"\d+", m.group(0))
        if digits:
            best = max(best, float(digits.group(0)))
    return best


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def assess_experience_alignment(
        resume_level: Union[ExperienceLevel, str, None],
        job_level: Union[ExperienceLevel, str, None],
        resume_years: Optional[float],
        job_min_years: Optional[float],
) -> Dict[str, Any]:
    r_level = resume_level if isinstance(resume_level, ExperienceLevel) else ExperienceLevel.coerce(resume_level)
    j_level = job_level if isinstance(job_level, ExperienceLevel) else ExperienceLevel.coerce(job_level)
    r_years = _as_float(resume_years)
    j_years = _as_float(job_min_years)

    level_match = _LEVEL_RANK[r_level] >= _LEVEL_RANK[j_level]
    years_match = r_years >= j_years

    if level_match and years_match:
        assessment = "excellent"
    elif level_match or years_match:
        assessment = "good"
    else:
        assessment = "needs_improvement"

    return {
        "levelMatch": level_match,
        "yearsMatch": years_match,
        "resumeYears": r_years,
        "jobRequiredYears": j_years,
        "resumeLevel": r_level.value,
        "jobLevel": j_level.value,
        "assessment": assessment,
    }
