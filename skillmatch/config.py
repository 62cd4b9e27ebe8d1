# skillmatch/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

# --- Storage ---

DEFAULT_DATA_DIR = ".skillmatch"
ANALYSIS_SUBDIR = "analyses"
ADDED_SKILLS_FILENAME = "added_skills.json"
RECORD_FORMAT_VERSION = "1.0"

# --- Scoring ---

DEFAULT_MUST_HAVE_WEIGHT = 0.7
DEFAULT_NICE_TO_HAVE_WEIGHT = 0.3

# --- AI extraction ---

SUPPORTED_PROVIDERS = ("anthropic", "openai", "openrouter", "ollama")

# Hard cap on each provider call. On expiry the caller falls back to the dictionary.
DEFAULT_AI_TIMEOUT_SECONDS = 30

# Characters of resume / job text sent to the model.
AI_MAX_INPUT_CHARS = 20000

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"

_DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-6",
    "openai": "gpt-4o-mini",
    "openrouter": "openai/gpt-4o-mini",
    "ollama": "llama3",
}

# Env vars checked per provider, first hit wins.
# Keys are never logged, never written to disk, never included in structured output.
_KEY_ENV_VARS: dict[str, tuple[str, ...]] = {
    "anthropic": ("SKILLMATCH_ANTHROPIC_KEY", "ANTHROPIC_API_KEY"),
    "openai": ("SKILLMATCH_OPENAI_KEY", "OPENAI_API_KEY"),
    "openrouter": ("SKILLMATCH_OPENROUTER_KEY", "OPENROUTER_API_KEY"),
}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in ("1", "true", "yes", "on")


def data_dir() -> Path:
    """Root directory for persisted analyses and user-added skills."""
    raw = (os.getenv("SKILLMATCH_DATA_DIR") or "").strip()
    return Path(raw) if raw else Path(DEFAULT_DATA_DIR)


def scoring_weights() -> Tuple[float, float]:
    """(must_have_weight, nice_to_have_weight) from env, falling back to 0.7 / 0.3."""
    return (
        _env_float("SKILLMATCH_MUST_HAVE_WEIGHT", DEFAULT_MUST_HAVE_WEIGHT),
        _env_float("SKILLMATCH_NICE_TO_HAVE_WEIGHT", DEFAULT_NICE_TO_HAVE_WEIGHT),
    )


def resolve_api_key(provider: str) -> Optional[str]:
    for name in _KEY_ENV_VARS.get(provider.strip().lower(), ()):
        value = (os.getenv(name) or "").strip()
        if value:
            return value
    return None


def ai_provider() -> str:
    """
    Provider selection, in priority order:
      1. USE_LOCAL_ANALYSE=true forces "ollama"
      2. SKILLMATCH_AI_PROVIDER when it names a supported provider
      3. first provider with an API key available
      4. "openai" (which then falls back to dictionary extraction without a key)
    """
    if _env_flag("USE_LOCAL_ANALYSE"):
        return "ollama"

    explicit = (os.getenv("SKILLMATCH_AI_PROVIDER") or "").strip().lower()
    if explicit in SUPPORTED_PROVIDERS:
        return explicit

    for provider in ("anthropic", "openai", "openrouter"):
        if resolve_api_key(provider):
            return provider
    return "openai"


def ai_model(provider: Optional[str] = None) -> str:
    override = (os.getenv("SKILLMATCH_AI_MODEL") or "").strip()
    if override:
        return override
    return _DEFAULT_MODELS.get(provider or ai_provider(), _DEFAULT_MODELS["openai"])


def ai_timeout_seconds() -> int:
    return max(1, _env_int("SKILLMATCH_AI_TIMEOUT_SECONDS", DEFAULT_AI_TIMEOUT_SECONDS))


def ollama_base_url() -> str:
    return (os.getenv("OLLAMA_BASE_URL") or DEFAULT_OLLAMA_BASE_URL).rstrip("/")


def ai_configured() -> bool:
    """True when at least one provider can be called (local Ollama needs no key)."""
    if ai_provider() == "ollama":
        return True
    return any(resolve_api_key(p) for p in ("anthropic", "openai", "openrouter"))


def _parse_llm_chain(raw: str | None) -> List[Tuple[str, str]]:
    """
    Parses: "openai/gpt-4o-mini,anthropic/claude-sonnet-4-6,openrouter/meta-llama/llama-3-70b"
    -> [("openai","gpt-4o-mini"), ...]

    Only the first "/" splits provider from model, so OpenRouter model ids keep their slash.
    Unknown providers are dropped.
    """
    if not raw:
        return []
    items: List[Tuple[str, str]] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "/" not in part:
            # Allow "gpt-4o-mini" shorthand -> assume openai
            items.append(("openai", part))
            continue
        provider, model = part.split("/", 1)
        provider = provider.strip().lower()
        model = model.strip()
        if provider in SUPPORTED_PROVIDERS and model:
            items.append((provider, model))
    return items


@dataclass(frozen=True)
class LLMFailoverConfig:
    chain: List[Tuple[str, str]]
    max_retries: int
    breaker_consecutive_fails: int
    timeout_seconds: int


def load_llm_failover_config() -> LLMFailoverConfig:
    """
    Chain comes from SKILLMATCH_LLM_CHAIN; when unset, a single candidate
    built from the detected provider and its model.
    """
    chain = _parse_llm_chain(os.getenv("SKILLMATCH_LLM_CHAIN"))
    if not chain:
        provider = ai_provider()
        chain = [(provider, ai_model(provider))]
    return LLMFailoverConfig(
        chain=chain,
        max_retries=_env_int("SKILLMATCH_LLM_MAX_RETRIES", 2),
        breaker_consecutive_fails=_env_int("SKILLMATCH_LLM_CIRCUIT_BREAKER_FAILS", 2),
        timeout_seconds=ai_timeout_seconds(),
    )
