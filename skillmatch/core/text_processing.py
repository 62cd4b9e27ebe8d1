from __future__ import annotations

import re
import unicodedata
from typing import Dict, List

# NOTE: This module is shared infrastructure.
# The extractor, the requirement categorizer and the confidence scorer all
# depend on it rather than re-implementing normalization or term lookup.

# Characters that make a term "symbol-bearing". Word boundaries are unreliable
# around them, so such terms (and multi-word terms) use plain substring lookup.
_SUBSTRING_MARKERS = (" ", ".", "#", "+")

# Sentence / clause boundaries for proximity heuristics. A period only splits
# when followed by whitespace or end of text so "node.js" stays intact.
_SENTENCE_SPLIT_RE = re.compile(r"(?:\n|[!?;]|\.(?=\s|$))+")

# Best-effort section headings. Only the skills section matters for scoring;
# the others exist so a skills section ends where the next heading starts.
_SECTION_ALIASES = {
    "skills": {
        "skills", "core skills", "key skills", "technical skills", "professional skills",
        "competencies", "technologies", "tech stack", "tools", "tools & technologies",
    },
    "summary": {"summary", "professional summary", "profile", "about", "objective"},
    "experience": {"experience", "work experience", "professional experience", "employment"},
    "projects": {"projects", "project experience"},
    "education": {"education", "certifications", "certification", "training"},
    "interests": {"interests", "volunteering", "activities", "hobbies"},
}


def normalize_text(text: str) -> str:
    """
    Deterministic normalization before any term lookup.

    - stable across platforms
    - remove unicode quirks (smart quotes, non-breaking spaces)
    - collapse runs of spaces/tabs but keep line breaks (sections rely on them)
    """
    if not text:
        return ""
    t = unicodedata.normalize("NFKC", text)
    t = t.replace(" ", " ")
    # Normalize common unicode dashes to '-'
    t = re.sub(r"[‐-―]", "-", t)
    t = re.sub(r"[ \t\f\v]+", " ", t)
    t = re.sub(r" ?\r?\n ?", "\n", t)
    return t.strip()


def needs_substring_match(term: str) -> bool:
    return any(marker in term for marker in _SUBSTRING_MARKERS)


def contains_term(text: str, term: str, *, case_sensitive: bool = False) -> bool:
    """
    Presence test shared by every dictionary lookup:
    - multi-word or symbol-bearing terms ("node.js", "c#", "machine learning"): substring
    - single tokens: word-boundary regex, so "java" does not hit "javascript";
      a preceding "." also blocks, so "js" does not hit "node.js"
    """
    if not term or not text:
        return False
    if not case_sensitive:
        text = text.lower()
        term = term.lower()
    if needs_substring_match(term):
        return term in text
    return re.search(rf"(?<![\w.]){re.escape(term)}(?!\w)", text) is not None


def count_occurrences(text: str, term: str) -> int:
    """Case-insensitive, non-overlapping substring count."""
    if not text or not term:
        return 0
    return text.lower().count(term.lower())


def split_sentences(text: str) -> List[str]:
    if not text:
        return []
    parts = _SENTENCE_SPLIT_RE.split(text)
    return [p.strip() for p in parts if p and p.strip()]


def _normalize_heading(line: str) -> str | None:
    raw = (line or "").strip()
    if not raw:
        return None
    raw = raw.rstrip(":").strip()
    lowered = raw.lower()
    if len(lowered) > 60:
        return None
    for key, aliases in _SECTION_ALIASES.items():
        if lowered in aliases:
            return key
    return None


def split_into_sections(text: str) -> Dict[str, str]:
    """
    Best-effort section splitter based on single-line headings.
    Works for .txt reliably; for PDF-extracted text it's best-effort.
    Text before the first heading lands in "other".
    """
    if not text or not text.strip():
        return {}

    current = "other"
    sections: Dict[str, List[str]] = {"other": []}

    for line in text.splitlines():
        h = _normalize_heading(line)
        if h:
            current = h
            sections.setdefault(current, [])
            continue
        # "Skills: python, docker" on one line
        head, sep, rest = line.partition(":")
        if sep and _normalize_heading(head) == "skills":
            sections.setdefault("skills", []).append(rest)
            continue
        sections.setdefault(current, []).append(line)

    return {k: "\n".join(v).strip() for k, v in sections.items() if "\n".join(v).strip()}
