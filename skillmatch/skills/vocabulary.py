from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Pattern, Sequence, Tuple

from skillmatch.skills import dictionary as _tables


def _clean(term: str) -> str:
    return " ".join((term or "").split()).strip().lower()


def _resolve_chains(aliases: Mapping[str, str]) -> Dict[str, str]:
    """
    Follow alias -> alias -> ... to a term that is not itself an alias, so that
    normalize(normalize(x)) == normalize(x). Cycles stop at the last unseen hop.
    Self-mappings ("mysql" -> "mysql") are dropped.
    """
    cleaned = {_clean(k): _clean(v) for k, v in aliases.items() if _clean(k) and _clean(v)}
    resolved: Dict[str, str] = {}
    for alias, target in cleaned.items():
        seen = {alias}
        while target in cleaned and target not in seen:
            seen.add(target)
            target = cleaned[target]
        if target != alias:
            resolved[alias] = target
    # A cycle can leave a target that is still an alias key; drop those so the
    # fixed point holds.
    return {k: v for k, v in resolved.items() if v not in resolved}


@dataclass(frozen=True, eq=False)
class SkillVocabulary:
    """
    Immutable skills configuration: taxonomy, alias table and variation rules.

    Built once (see default_vocabulary) and handed to the extractor, normalizer
    and matching engine. Tests build small ones with SkillVocabulary.build().
    """
    categories: Mapping[str, Tuple[str, ...]]
    aliases: Mapping[str, str]
    version_patterns: Tuple[Pattern[str], ...] = ()
    extension_skills: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    acronym_expansions: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def build(
            cls,
            *,
            categories: Mapping[str, Iterable[str]],
            aliases: Optional[Mapping[str, str]] = None,
            version_patterns: Sequence[str] = (),
            extension_skills: Optional[Mapping[str, str]] = None,
            acronym_expansions: Optional[Mapping[str, str]] = None,
    ) -> "SkillVocabulary":
        cats: Dict[str, Tuple[str, ...]] = {}
        for name, terms in categories.items():
            seen: List[str] = []
            for t in terms:
                ct = _clean(t)
                if ct and ct not in seen:
                    seen.append(ct)
            cats[name] = tuple(seen)

        return cls(
            categories=MappingProxyType(cats),
            aliases=MappingProxyType(_resolve_chains(aliases or {})),
            version_patterns=tuple(re.compile(p, re.IGNORECASE) for p in version_patterns),
            extension_skills=MappingProxyType(
                {_clean(k).lstrip("."): _clean(v) for k, v in (extension_skills or {}).items()}
            ),
            acronym_expansions=MappingProxyType(
                {_clean(k): _clean(v) for k, v in (acronym_expansions or {}).items()}
            ),
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def terms(self, categories: Optional[Iterable[str]] = None) -> Tuple[str, ...]:
        """Vocabulary terms, deduped first-seen. Unknown category names contribute nothing."""
        names = list(self.categories) if categories is None else list(categories)
        out: List[str] = []
        seen = set()
        for name in names:
            for t in self.categories.get(name, ()):
                if t not in seen:
                    seen.add(t)
                    out.append(t)
        return tuple(out)

    def resolve_alias(self, token: str) -> str:
        return self.aliases.get(token, token)

    def category_of(self, skill: str) -> Optional[str]:
        s = _clean(skill)
        for name, terms in self.categories.items():
            if s in terms:
                return name
        return None

    @property
    def known_terms(self) -> FrozenSet[str]:
        known = set(self.terms())
        known.update(self.aliases.keys())
        known.update(self.aliases.values())
        return frozenset(known)


@lru_cache(maxsize=1)
def default_vocabulary() -> SkillVocabulary:
    return SkillVocabulary.build(
        categories=_tables.SKILL_CATEGORIES,
        aliases=_tables.SKILL_ALIASES,
        version_patterns=_tables.VERSION_PATTERNS,
        extension_skills=_tables.EXTENSION_SKILLS,
        acronym_expansions=_tables.ACRONYM_EXPANSIONS,
    )
