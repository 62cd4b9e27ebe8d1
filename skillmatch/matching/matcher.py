from __future__ import annotations

import re
from typing import Set

from rapidfuzz.distance import Levenshtein

# Token overlap splits on whitespace and the separators skill names commonly
# use ("spring-boot", "node.js").
_TOKEN_SPLIT_RE = re.compile(r"[\s\-.]+")

# Only tokens longer than this count toward an overlap.
MIN_OVERLAP_TOKEN_LEN = 2

# Both strings must be longer than this before edit distance is consulted.
MIN_FUZZY_LEN = 4
SIMILARITY_THRESHOLD = 0.85


def _key(s: str) -> str:
    return (s or "").strip().lower()


def _overlap_tokens(s: str) -> Set[str]:
    return {t for t in _TOKEN_SPLIT_RE.split(s) if len(t) > MIN_OVERLAP_TOKEN_LEN}


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert / delete / substitute, unit cost)."""
    return Levenshtein.distance(a, b)


def similarity_ratio(a: str, b: str) -> float:
    """(max_len - distance) / max_len, 1.0 for two empty strings."""
    return Levenshtein.normalized_similarity(a, b)


def skills_match(a: str, b: str, fuzzy: bool = True) -> bool:
    """
    Decide whether two skill strings refer to the same skill. First hit wins:

    1. exact (after lowercase + trim)
    2. substring containment either way ("react" ~ "react native")
    3. a shared token longer than 2 chars ("spring boot" ~ "spring-framework")
    4. both longer than 4 chars and similarity above 0.85 ("kubernetes" ~ "kubernets")

    Steps 2-4 run only when fuzzy is on. Step 2 over-matches short names
    ("go" ~ "google"); that trade-off is accepted.
    """
    ka, kb = _key(a), _key(b)
    if not ka or not kb:
        return False
    if ka == kb:
        return True
    if not fuzzy:
        return False

    if ka in kb or kb in ka:
        return True

    if _overlap_tokens(ka) & _overlap_tokens(kb):
        return True

    if len(ka) > MIN_FUZZY_LEN and len(kb) > MIN_FUZZY_LEN:
        return similarity_ratio(ka, kb) > SIMILARITY_THRESHOLD

    return False
