from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from skillmatch.experience import assess_experience_alignment, detect_job_level
from skillmatch.matching.types import WeightedMatchResult
from skillmatch.models import (
    ExtractionResult,
    JobPosting,
    JobSkillProfile,
    ResumeIdentity,
    ResumeSkillProfile,
    utc_now,
)

# (lower bound, category, recommendation), checked top-down
_BANDS: Tuple[Tuple[int, str, str], ...] = (
    (85, "excellent", "Excellent fit! You meet most requirements."),
    (70, "good", "Good match! Strong candidate for this role."),
    (55, "fair", "Moderate fit. Consider highlighting relevant experience."),
    (40, "poor", "Some gaps exist. Focus on developing key skills."),
    (0, "very-poor", "Significant skill gaps. Consider this for future growth."),
)

# Coarse domain buckets for "Strong X expertise" strengths
_DOMAIN_BUCKETS: Dict[str, Tuple[str, ...]] = {
    "Frontend": ("react", "angular", "vue", "javascript", "typescript", "html", "css"),
    "Backend": ("node.js", "python", "java", "express", "django", "spring"),
    "Database": ("mysql", "postgresql", "mongodb", "redis"),
    "Cloud": ("aws", "azure", "google cloud", "docker", "kubernetes"),
    "Mobile": ("react native", "flutter", "ios", "android"),
    "Data": ("machine learning", "data science", "python", "sql"),
}

TOP_EXTRA_SKILLS = 10


def _band(percentage: int) -> Tuple[str, str]:
    for floor, category, text in _BANDS:
        if percentage >= floor:
            return category, text
    return _BANDS[-1][1], _BANDS[-1][2]


def match_recommendation(percentage: int) -> str:
    return _band(percentage)[1]


def match_category(percentage: int) -> str:
    return _band(percentage)[0]


def priority_level(critical_gaps: int) -> str:
    if critical_gaps > 3:
        return "high"
    if critical_gaps > 1:
        return "medium"
    return "low"


def _domain_strengths(skills: List[str]) -> List[str]:
    out: List[str] = []
    for domain, bucket in _DOMAIN_BUCKETS.items():
        hits = [s for s in skills if any(b in s for b in bucket)]
        if len(hits) >= 3:
            out.append(f"Strong {domain} expertise")
    return out


def strengths(result: WeightedMatchResult) -> List[str]:
    must, nice, overall = result.must_have, result.nice_to_have, result.overall
    out: List[str] = []
    if must.match_percentage >= 80:
        out.append("Strong alignment with core requirements")
    if nice.match_percentage >= 70:
        out.append("Excellent additional qualifications")
    if len(overall.extra_skills) > 10:
        out.append("Diverse technical background with many bonus skills")
    if not must.missing_skills:
        out.append("Meets all essential requirements")
    out.extend(_domain_strengths(must.matched_skills + nice.matched_skills))
    return out[:5]


def improvements(result: WeightedMatchResult) -> List[str]:
    must, nice = result.must_have, result.nice_to_have
    out: List[str] = []
    if must.missing_skills:
        out.append(f"Focus on developing: {', '.join(must.missing_skills[:3])}")
    if len(must.missing_skills) > 5:
        out.append("Consider additional training to meet core requirements")
    if nice.missing_skills and len(must.missing_skills) <= 2:
        out.append(f"Enhance profile with: {', '.join(nice.missing_skills[:3])}")
    return out[:3]


def career_advice(result: WeightedMatchResult, job: JobPosting) -> List[str]:
    out: List[str] = []
    level = detect_job_level(job.title, job.description)
    if level == "senior" and result.must_have.match_percentage < 70:
        out.append("Consider gaining more hands-on experience in key technologies")
    if level == "entry" and len(result.overall.extra_skills) > 15:
        out.append("You may be overqualified - consider more senior positions")
    if "startup" in (job.description or "").lower():
        out.append("Highlight adaptability and willingness to wear multiple hats")
    return out[:3]


def build_report(
        result: WeightedMatchResult,
        job: JobPosting,
        *,
        resume_profile: Optional[ResumeSkillProfile] = None,
        job_profile: Optional[JobSkillProfile] = None,
) -> Dict[str, Any]:
    """
    Human-facing interpretation of a weighted match. Pure function of its
    inputs; percentages are never recomputed here.
    """
    critical = list(result.must_have.missing_skills)
    minor = list(result.nice_to_have.missing_skills)

    report: Dict[str, Any] = {
        "summary": {
            "totalJobSkills": result.must_have.total_job_skills + result.nice_to_have.total_job_skills,
            "totalMatched": len(result.must_have.matched_skills) + len(result.nice_to_have.matched_skills),
            "criticalGaps": len(critical),
            "bonusSkills": len(result.overall.extra_skills),
            "matchCategory": match_category(result.weighted_match_percentage),
        },
        "skillGaps": {
            "critical": critical,
            "minor": minor,
            "totalGaps": len(critical) + len(minor),
            "priorityLevel": priority_level(len(critical)),
        },
        "insights": {
            "strengths": strengths(result),
            "improvements": improvements(result),
            "careerAdvice": career_advice(result, job),
        },
        "topExtraSkills": result.overall.extra_skills[:TOP_EXTRA_SKILLS],
        "scoring": {
            "algorithm": "weighted_matching_v1",
            "weights": result.weights.to_dict(),
            "breakdown": {
                "mustHaveScore": result.must_have.match_percentage,
                "niceToHaveScore": result.nice_to_have.match_percentage,
                "weightedFinal": result.weighted_match_percentage,
            },
        },
    }

    if resume_profile is not None and job_profile is not None:
        report["experienceAlignment"] = assess_experience_alignment(
            resume_profile.experience_level,
            job_profile.seniority_level,
            resume_profile.years_of_experience,
            job_profile.minimum_years,
        )

    return report


def _method_label(resume_ex: ExtractionResult, job_ex: ExtractionResult) -> str:
    if resume_ex.method == job_ex.method:
        return resume_ex.method.value
    return "mixed"


def build_payload(
        result: WeightedMatchResult,
        job: JobPosting,
        resume_ex: ExtractionResult,
        job_ex: ExtractionResult,
        *,
        ai_enabled: bool,
        added_skills: Optional[List[str]] = None,
        resume_identity: Optional[ResumeIdentity] = None,
) -> Dict[str, Any]:
    """
    The JSON envelope handed to callers and persisted as a record's analysisData.
    Keys are camelCase because the envelope is consumed outside Python.
    """
    resume_profile = resume_ex.data if isinstance(resume_ex.data, ResumeSkillProfile) else None
    job_profile = job_ex.data if isinstance(job_ex.data, JobSkillProfile) else None
    pct = result.weighted_match_percentage

    metadata: Dict[str, Any] = {
        "analysisMethod": _method_label(resume_ex, job_ex),
        "aiEnabled": ai_enabled,
        "aiUsed": resume_ex.ai_used or job_ex.ai_used,
        "timestamp": utc_now().isoformat(),
        "resumeExtraction": resume_ex.method.value,
        "jobExtraction": job_ex.method.value,
        "addedSkills": list(added_skills or []),
    }
    errors = [e for e in (resume_ex.error, job_ex.error) if e]
    if errors:
        metadata["fallbackReasons"] = errors
    if resume_identity is not None:
        metadata["resumeInfo"] = resume_identity.to_dict()

    return {
        "weightedMatchPercentage": pct,
        "matchPercentage": result.overall.match_percentage,
        "mustHaveMatchPercentage": result.must_have.match_percentage,
        "niceToHaveMatchPercentage": result.nice_to_have.match_percentage,
        "matchedSkills": list(result.overall.matched_skills),
        "missingSkills": list(result.overall.missing_skills),
        "extraSkills": list(result.overall.extra_skills),
        "mustHave": {
            "matched": list(result.must_have.matched_skills),
            "missing": list(result.must_have.missing_skills),
        },
        "niceToHave": {
            "matched": list(result.nice_to_have.matched_skills),
            "missing": list(result.nice_to_have.missing_skills),
        },
        "recommendation": match_recommendation(pct),
        "matchCategory": match_category(pct),
        "report": build_report(result, job, resume_profile=resume_profile, job_profile=job_profile),
        "context": {
            "job": {
                "url": job.url,
                "title": job.title or "Unknown Position",
                "company": job.company,
                "level": detect_job_level(job.title, job.description),
            },
            "resume": {
                "experience": resume_profile.experience_level.value if resume_profile else "unknown",
                "skillCount": result.overall.total_resume_skills,
            },
        },
        "metadata": metadata,
    }
