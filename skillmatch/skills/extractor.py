from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from skillmatch.core.text_processing import (
    contains_term,
    count_occurrences,
    normalize_text,
    split_into_sections,
)
from skillmatch.skills.normalizer import normalize_skill
from skillmatch.skills.vocabulary import SkillVocabulary, default_vocabulary

# Context phrases that raise confidence; "{}" is the skill.
_CONTEXT_PATTERNS = (
    "experience with {}",
    "proficient in {}",
    "expert in {}",
    "skilled in {}",
    "{} development",
    "{} programming",
    "years of {}",
    "{} projects",
)

_BASE_CONFIDENCE = 0.5
_OCCURRENCE_STEP = 0.1
_OCCURRENCE_CAP = 0.3
_CONTEXT_BONUS = 0.2
_SKILLS_SECTION_BONUS = 0.2

HIGH_CONFIDENCE_THRESHOLD = 0.7
TOP_SKILLS_LIMIT = 10


@dataclass(frozen=True)
class ExtractionOptions:
    case_sensitive: bool = False
    include_variations: bool = True
    min_word_length: int = 2
    # None means every taxonomy category
    categories: Optional[Sequence[str]] = None


@dataclass(frozen=True)
class SkillConfidence:
    skill: str
    confidence: float
    category: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"skill": self.skill, "confidence": self.confidence, "category": self.category}


def _extension_cues(text: str, vocab: SkillVocabulary) -> List[str]:
    """
    "*.py", "main.go", "app.ts" imply the language. A dotted token that is
    itself a known term ("node.js", "vue.js") is a framework name, not a cue.
    """
    if not vocab.extension_skills:
        return []
    exts = "|".join(re.escape(e) for e in sorted(vocab.extension_skills, key=len, reverse=True))
    pattern = re.compile(rf"(?<![\w.])([\w*\-/]*)\.({exts})\b", re.IGNORECASE)
    known = vocab.known_terms

    found: List[str] = []
    for m in pattern.finditer(text):
        if m.group(0).lower() in known:
            continue
        found.append(vocab.extension_skills[m.group(2).lower()])
    return found


def _variation_hits(text: str, vocab: SkillVocabulary, opts: ExtractionOptions) -> List[str]:
    hits: List[str] = []

    for alias, canonical in vocab.aliases.items():
        if len(alias) >= opts.min_word_length and contains_term(text, alias, case_sensitive=opts.case_sensitive):
            hits.append(canonical)

    for pattern in vocab.version_patterns:
        for m in pattern.finditer(text):
            hits.append(m.group(1).lower())

    hits.extend(_extension_cues(text, vocab))

    for phrase, skill in vocab.acronym_expansions.items():
        if contains_term(text, phrase, case_sensitive=opts.case_sensitive):
            hits.append(skill)

    return hits


def extract_skills(
        text: str,
        options: Optional[ExtractionOptions] = None,
        vocabulary: Optional[SkillVocabulary] = None,
) -> List[str]:
    """
    Dictionary extraction: every vocabulary term found in `text`, canonicalized,
    deduplicated and sorted.

    Single-token terms need word boundaries ("java" does not hit "javascript");
    terms containing space, ".", "#" or "+" are plain substrings.
    With include_variations, aliases, version-suffixed mentions ("react 18"),
    file-extension cues (".py") and acronym expansions ("es6") also count,
    limited to the requested categories when a category filter is set.
    """
    if not isinstance(text, str) or not text.strip():
        return []

    opts = options or ExtractionOptions()
    vocab = vocabulary or default_vocabulary()
    body = normalize_text(text)
    if not opts.case_sensitive:
        body = body.lower()

    raw: List[str] = []
    for term in vocab.terms(opts.categories):
        if len(term) >= opts.min_word_length and contains_term(body, term, case_sensitive=opts.case_sensitive):
            raw.append(term)

    if opts.include_variations:
        variations = _variation_hits(body, vocab, opts)
        if opts.categories is not None:
            allowed = set(vocab.terms(opts.categories))
            variations = [
                v for v in variations
                if normalize_skill(v, vocab, case_sensitive=opts.case_sensitive) in allowed
            ]
        raw.extend(variations)

    found = set()
    for s in raw:
        canonical = normalize_skill(s, vocab, case_sensitive=opts.case_sensitive)
        if canonical:
            found.add(canonical)
    return sorted(found)


def find_skill_category(skill: str, vocabulary: Optional[SkillVocabulary] = None) -> Optional[str]:
    """First taxonomy category listing the skill, or None."""
    return (vocabulary or default_vocabulary()).category_of(skill)


def calculate_skill_confidence(text: str, skill: str, skills_section: Optional[str] = None) -> float:
    """
    0.5 base
    + 0.1 per mention (capped at +0.3)
    + 0.2 when a context phrase ("experience with X", "X development", ...) appears
    + 0.2 when X appears in the skills section
    capped at 1.0. For ranking/display only.
    """
    lowered = (text or "").lower()
    s = (skill or "").lower()
    confidence = _BASE_CONFIDENCE
    confidence += min(count_occurrences(lowered, s) * _OCCURRENCE_STEP, _OCCURRENCE_CAP)

    if any(p.format(s) in lowered for p in _CONTEXT_PATTERNS):
        confidence += _CONTEXT_BONUS

    if skills_section and contains_term(skills_section, s):
        confidence += _SKILLS_SECTION_BONUS

    return round(min(confidence, 1.0), 4)


def extract_skills_with_confidence(
        text: str,
        options: Optional[ExtractionOptions] = None,
        vocabulary: Optional[SkillVocabulary] = None,
) -> List[SkillConfidence]:
    if not isinstance(text, str) or not text.strip():
        return []

    vocab = vocabulary or default_vocabulary()
    body = normalize_text(text)
    skills_section = split_into_sections(body).get("skills")

    scored = [
        SkillConfidence(
            skill=skill,
            confidence=calculate_skill_confidence(body, skill, skills_section),
            category=vocab.category_of(skill),
        )
        for skill in extract_skills(text, options, vocab)
    ]
    # Stable on ties: extract_skills output is already alphabetical
    scored.sort(key=lambda sc: sc.confidence, reverse=True)
    return scored


def skill_statistics(
        text: str,
        options: Optional[ExtractionOptions] = None,
        vocabulary: Optional[SkillVocabulary] = None,
) -> Dict[str, Any]:
    skills = extract_skills_with_confidence(text, options, vocabulary)
    breakdown: Dict[str, int] = {}
    for sc in skills:
        if sc.category:
            breakdown[sc.category] = breakdown.get(sc.category, 0) + 1

    return {
        "totalSkills": len(skills),
        "highConfidenceSkills": sum(1 for sc in skills if sc.confidence > HIGH_CONFIDENCE_THRESHOLD),
        "categoryBreakdown": breakdown,
        "topSkills": [sc.to_dict() for sc in skills[:TOP_SKILLS_LIMIT]],
        "averageConfidence": (sum(sc.confidence for sc in skills) / len(skills)) if skills else 0.0,
    }


def skills_by_category(skills: Iterable[str], vocabulary: Optional[SkillVocabulary] = None) -> Dict[str, List[str]]:
    """Group skills by taxonomy category; unknown skills land in "other"."""
    vocab = vocabulary or default_vocabulary()
    grouped: Dict[str, List[str]] = {}
    for s in skills:
        grouped.setdefault(vocab.category_of(s) or "other", []).append(s)
    return grouped
