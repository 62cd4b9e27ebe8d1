from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from skillmatch.config import DEFAULT_MUST_HAVE_WEIGHT, DEFAULT_NICE_TO_HAVE_WEIGHT


@dataclass(frozen=True)
class SkillWeights:
    must_have: float = DEFAULT_MUST_HAVE_WEIGHT
    nice_to_have: float = DEFAULT_NICE_TO_HAVE_WEIGHT

    def __post_init__(self) -> None:
        if self.must_have < 0 or self.nice_to_have < 0:
            raise ValueError("skill weights must be non-negative")
        if self.must_have + self.nice_to_have <= 0:
            raise ValueError("at least one skill weight must be positive")

    @property
    def total(self) -> float:
        return self.must_have + self.nice_to_have

    def to_dict(self) -> Dict[str, float]:
        return {"mustHave": self.must_have, "niceToHave": self.nice_to_have}


@dataclass(frozen=True)
class MatchResult:
    matched_skills: List[str]
    missing_skills: List[str]
    extra_skills: List[str]
    match_percentage: int
    total_job_skills: int
    total_resume_skills: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matchedSkills": list(self.matched_skills),
            "missingSkills": list(self.missing_skills),
            "extraSkills": list(self.extra_skills),
            "matchPercentage": self.match_percentage,
            "totalJobSkills": self.total_job_skills,
            "totalResumeSkills": self.total_resume_skills,
        }


@dataclass(frozen=True)
class WeightedMatchResult:
    must_have: MatchResult
    nice_to_have: MatchResult
    # Over the union of must-have and nice-to-have job skills
    overall: MatchResult
    weighted_match_percentage: int
    weights: SkillWeights = field(default_factory=SkillWeights)
