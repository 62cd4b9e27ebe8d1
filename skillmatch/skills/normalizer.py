from __future__ import annotations

from typing import Iterable, List, Optional

from skillmatch.skills.vocabulary import SkillVocabulary, default_vocabulary


def normalize_skill(
        raw: str,
        vocabulary: Optional[SkillVocabulary] = None,
        *,
        case_sensitive: bool = False,
        synonyms: bool = True,
) -> str:
    """
    Canonical SkillToken for a raw mention: trimmed, whitespace collapsed,
    lowercased (unless case_sensitive), alias-resolved.

    Empty or non-string input returns "" (callers drop it before building sets).
    Alias lookup is always case-insensitive; alias targets are lowercase.
    """
    if not isinstance(raw, str):
        return ""
    token = " ".join(raw.split())
    if not token:
        return ""
    if not case_sensitive:
        token = token.lower()
    if synonyms:
        vocab = vocabulary or default_vocabulary()
        target = vocab.aliases.get(token.lower())
        if target is not None:
            return target
    return token


def normalize_skills(
        skills: Iterable[str],
        vocabulary: Optional[SkillVocabulary] = None,
        *,
        case_sensitive: bool = False,
        synonyms: bool = True,
) -> List[str]:
    """Normalize, drop empties, dedupe first-seen."""
    out: List[str] = []
    seen = set()
    for s in skills or []:
        n = normalize_skill(s, vocabulary, case_sensitive=case_sensitive, synonyms=synonyms)
        if n and n not in seen:
            seen.add(n)
            out.append(n)
    return out
