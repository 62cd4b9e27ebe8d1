from .engine import calculate_match_percentage, compare_skills, compare_weighted, round_half_up
from .matcher import levenshtein_distance, similarity_ratio, skills_match
from .types import MatchResult, SkillWeights, WeightedMatchResult

__all__ = [
    "calculate_match_percentage",
    "compare_skills",
    "compare_weighted",
    "round_half_up",
    "levenshtein_distance",
    "similarity_ratio",
    "skills_match",
    "MatchResult",
    "SkillWeights",
    "WeightedMatchResult",
]
