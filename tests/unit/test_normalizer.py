from __future__ import annotations

import pytest

from skillmatch.matching.engine import compare_skills
from skillmatch.skills.normalizer import normalize_skill, normalize_skills
from skillmatch.skills.vocabulary import SkillVocabulary, default_vocabulary


def test_trims_lowercases_and_resolves_aliases() -> None:
    assert normalize_skill("  ReactJS ") == "react"
    assert normalize_skill("JS") == "javascript"
    assert normalize_skill("K8s") == "kubernetes"
    assert normalize_skill("Node   JS") == "node js"


@pytest.mark.parametrize("raw", ["", "   ", None, 42])
def test_blank_or_non_string_input_is_empty(raw) -> None:
    assert normalize_skill(raw) == ""


@pytest.mark.parametrize(
    "raw",
    ["JS", "ReactJS", "cicd", "CI CD", "GCP", "google cloud platform", "Postgres", "golang", "Docker"],
)
def test_normalization_is_idempotent(raw) -> None:
    once = normalize_skill(raw)
    assert normalize_skill(once) == once


def test_alias_chains_resolve_to_a_fixed_point() -> None:
    vocab = default_vocabulary()
    assert all(target not in vocab.aliases for target in vocab.aliases.values())
    assert normalize_skill("cicd") == "continuous integration"


def test_case_sensitive_keeps_case_but_still_resolves_aliases() -> None:
    assert normalize_skill("Python", case_sensitive=True) == "Python"
    assert normalize_skill("JS", case_sensitive=True) == "javascript"


def test_synonyms_off_skips_alias_table() -> None:
    assert normalize_skill("JS", synonyms=False) == "js"


def test_normalize_skills_dedupes_first_seen_and_drops_empties() -> None:
    assert normalize_skills(["JS", "javascript", "", "ReactJS", "  "]) == ["javascript", "react"]


def test_custom_vocabulary_is_used_instead_of_builtin() -> None:
    vocab = SkillVocabulary.build(categories={"lang": ["python"]}, aliases={"py": "python"})
    assert normalize_skill("PY", vocab) == "python"
    # builtin alias not present in this vocabulary
    assert normalize_skill("js", vocab) == "js"


def test_build_resolves_chains_and_drops_cycles() -> None:
    vocab = SkillVocabulary.build(
        categories={},
        aliases={"a": "b", "b": "c", "x": "y", "y": "x", "mysql": "mysql"},
    )
    assert vocab.aliases["a"] == "c"
    assert vocab.aliases["b"] == "c"
    assert "x" not in vocab.aliases
    assert "y" not in vocab.aliases
    assert "mysql" not in vocab.aliases


def test_alias_spellings_match_exactly() -> None:
    result = compare_skills(["JS", "ReactJS"], ["javascript", "react"])
    assert result.match_percentage == 100
    assert result.matched_skills == ["javascript", "react"]
    assert result.missing_skills == []
