from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from skillmatch.core.text_processing import contains_term, split_sentences
from skillmatch.skills.normalizer import normalize_skills
from skillmatch.skills.vocabulary import SkillVocabulary

MUST_HAVE_CUES: Tuple[str, ...] = (
    "required", "must have", "essential", "mandatory", "minimum",
    "qualified candidates must", "you must", "required experience",
    "minimum qualifications", "basic requirements",
)

NICE_TO_HAVE_CUES: Tuple[str, ...] = (
    "preferred", "nice to have", "bonus", "plus", "advantage", "would be great",
    "additional", "preferred qualifications", "nice-to-have", "a plus", "beneficial",
)

# Uncued skills listed in the first 70% of the extraction order count as must-have.
MUST_HAVE_POSITION_CUTOFF = 0.7

# Accepted spellings for each side of a requirement mapping, in priority order.
_MUST_KEYS = ("mustHave", "must_have", "must_have_skills", "required", "required_skills")
_NICE_KEYS = ("niceToHave", "nice_to_have", "good_to_have_skills", "goodToHave", "preferred", "preferred_skills")


@dataclass(frozen=True)
class JobRequirement:
    """
    The one shape the matching engine accepts.

    must_have and nice_to_have hold canonical skill tokens and are disjoint:
    a skill listed on both sides stays must-have only.
    """
    must_have: Tuple[str, ...] = ()
    nice_to_have: Tuple[str, ...] = ()

    @classmethod
    def build(
            cls,
            must_have: Iterable[str] = (),
            nice_to_have: Iterable[str] = (),
            vocabulary: Optional[SkillVocabulary] = None,
    ) -> "JobRequirement":
        must = normalize_skills(must_have, vocabulary)
        must_set = set(must)
        nice = [s for s in normalize_skills(nice_to_have, vocabulary) if s not in must_set]
        return cls(must_have=tuple(must), nice_to_have=tuple(nice))

    @property
    def all_skills(self) -> List[str]:
        return list(self.must_have) + list(self.nice_to_have)

    @property
    def is_empty(self) -> bool:
        return not self.must_have and not self.nice_to_have

    def to_dict(self) -> dict:
        return {"mustHave": list(self.must_have), "niceToHave": list(self.nice_to_have)}


def _first_list(data: Mapping[str, Any], keys: Sequence[str]) -> List[str]:
    for k in keys:
        value = data.get(k)
        if value is None:
            continue
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value if v is not None]
    return []


def job_requirement_from_mapping(
        data: Optional[Mapping[str, Any]],
        vocabulary: Optional[SkillVocabulary] = None,
) -> JobRequirement:
    """
    Adapt any of the requirement shapes seen at the boundary:

        {"mustHave": [...], "niceToHave": [...]}
        {"must_have_skills": [...], "good_to_have_skills": [...]}
        {"required": [...], "preferred": [...]}

    Missing sides are empty. Unknown shapes yield an empty requirement.
    """
    if not data:
        return JobRequirement()
    return JobRequirement.build(
        must_have=_first_list(data, _MUST_KEYS),
        nice_to_have=_first_list(data, _NICE_KEYS),
        vocabulary=vocabulary,
    )


def _has_cue(sentence: str, cues: Sequence[str]) -> bool:
    return any(contains_term(sentence, cue) for cue in cues)


def categorize_job_skills(
        description: str,
        job_skills: Sequence[str],
        vocabulary: Optional[SkillVocabulary] = None,
) -> JobRequirement:
    """
    Split extracted job skills into must-have / nice-to-have from the wording
    around them.

    For each skill, every sentence mentioning it is scanned for cue phrases:
    - any nice-to-have cue -> nice-to-have
    - otherwise a must-have cue -> must-have
    - no cue at all -> position in job_skills decides (first 70% must-have)

    This is a heuristic; phrasing like "Docker is a plus, Kubernetes required"
    in one sentence marks both as nice-to-have.
    """
    skills = list(job_skills or [])
    sentences = split_sentences(description or "")
    cutoff = len(skills) * MUST_HAVE_POSITION_CUTOFF

    must: List[str] = []
    nice: List[str] = []
    for idx, skill in enumerate(skills):
        mentions = [s for s in sentences if contains_term(s, skill)]
        has_nice = any(_has_cue(s, NICE_TO_HAVE_CUES) for s in mentions)
        has_must = any(_has_cue(s, MUST_HAVE_CUES) for s in mentions)

        if has_nice:
            nice.append(skill)
        elif has_must or idx < cutoff:
            must.append(skill)
        else:
            nice.append(skill)

    return JobRequirement.build(must_have=must, nice_to_have=nice, vocabulary=vocabulary)
