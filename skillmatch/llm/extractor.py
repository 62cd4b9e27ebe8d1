"""
skillmatch/llm/extractor.py

SkillExtractor protocol + LLMSkillExtractor / FailoverSkillExtractor.

Design principles:
- One JSON-mode call per document (resume or job), bounded by a client timeout
- Any failure raises SkillExtractorError; the caller falls back to the
  dictionary extractor and records the provenance
- Skill names coming back from a model are cleaned and canonicalized the same
  way dictionary output is, so both paths feed the matcher identical tokens
- API keys MUST NOT appear in any log, exception message or structured output
"""
from __future__ import annotations

import json
import logging
import random
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple

from skillmatch import config as _config
from skillmatch.llm.prompt import (
    JOB_SYSTEM_PROMPT,
    RESUME_SYSTEM_PROMPT,
    build_job_prompt,
    build_resume_prompt,
)
from skillmatch.models import ExperienceLevel, JobSkillProfile, ResumeSkillProfile
from skillmatch.skills.normalizer import normalize_skills
from skillmatch.skills.vocabulary import SkillVocabulary

logger = logging.getLogger(__name__)

TRANSIENT_HINTS = (
    "rate limit",
    "ratelimit",
    "too many requests",
    "overloaded",
    "timeout",
    "timed out",
    "try again",
    "server error",
    "503",
    "529",
)

# Top-level optional imports so tests can patch them via module attribute.
# The actual ImportError (if library not installed) is raised at call time.
try:
    import anthropic
except ImportError:
    anthropic = None  # type: ignore[assignment]

try:
    import openai
except ImportError:
    openai = None  # type: ignore[assignment]

_MAX_TOKENS = 1500
_TEMPERATURE = 0.1

_SKILL_CHARS_RE = re.compile(r"[^\w\s.+#-]")
_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

_CATEGORY_KEYS = ("programming_languages", "frameworks", "databases", "cloud_platforms", "tools", "other")


class SkillExtractorError(Exception):
    """Raised when AI extraction fails for any reason (missing SDK, API error, timeout, bad output)."""


class SkillExtractor(Protocol):
    def extract_resume(self, resume_text: str) -> ResumeSkillProfile:
        ...

    def extract_job(self, job_text: str, job_title: str = "") -> JobSkillProfile:
        ...


# ----------------------------------------------------------------------
# Response parsing
# ----------------------------------------------------------------------

def clean_skill_names(values: Any) -> List[str]:
    """
    lowercase, strip characters other than word/space/.+#-, collapse spaces,
    drop 1-char leftovers, dedupe first-seen. Non-list input -> [].
    """
    if not isinstance(values, list):
        return []
    out: List[str] = []
    for v in values:
        if not isinstance(v, str):
            continue
        s = _SKILL_CHARS_RE.sub("", v.lower())
        s = " ".join(s.split())
        if len(s) > 1 and s not in out:
            out.append(s)
    return out


def parse_json_object(raw: str) -> Dict[str, Any]:
    """Decode a model reply into a dict. Tolerates ```json fences."""
    text = _FENCE_RE.sub("", (raw or "").strip())
    if not text:
        raise SkillExtractorError("LLM returned an empty response.")
    try:
        data = json.loads(text)
    except ValueError:
        raise SkillExtractorError("LLM returned non-JSON output.") from None
    if not isinstance(data, dict):
        raise SkillExtractorError("LLM returned JSON that is not an object.")
    return data


def _as_float(value: Any) -> float:
    try:
        return max(0.0, float(value or 0))
    except (TypeError, ValueError):
        return 0.0


def _as_strings(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip())


def _canonical(values: Any, vocabulary: Optional[SkillVocabulary]) -> List[str]:
    return normalize_skills(clean_skill_names(values), vocabulary)


def _categories(data: Dict[str, Any], vocabulary: Optional[SkillVocabulary]) -> Dict[str, List[str]]:
    raw = data.get("skills_by_category")
    raw = raw if isinstance(raw, dict) else {}
    return {k: _canonical(raw.get(k), vocabulary) for k in _CATEGORY_KEYS}


def resume_profile_from_json(data: Dict[str, Any], vocabulary: Optional[SkillVocabulary] = None) -> ResumeSkillProfile:
    tech = data.get("technical_skills")
    if not isinstance(tech, dict):
        raise SkillExtractorError("LLM resume output is missing 'technical_skills'.")

    # A skill keeps its highest proficiency only
    expert = _canonical(tech.get("expert"), vocabulary)
    proficient = [s for s in _canonical(tech.get("proficient"), vocabulary) if s not in expert]
    familiar = [s for s in _canonical(tech.get("familiar"), vocabulary) if s not in expert and s not in proficient]

    return ResumeSkillProfile(
        expert=tuple(expert),
        proficient=tuple(proficient),
        familiar=tuple(familiar),
        skills_by_category=_categories(data, vocabulary),
        experience_level=ExperienceLevel.coerce(data.get("experience_level")),
        years_of_experience=_as_float(data.get("years_of_experience")),
        certifications=_as_strings(data.get("certifications")),
        education=str(data.get("education") or "unknown"),
    )


def job_profile_from_json(data: Dict[str, Any], vocabulary: Optional[SkillVocabulary] = None) -> JobSkillProfile:
    if not isinstance(data.get("must_have_skills"), list) and not isinstance(data.get("good_to_have_skills"), list):
        raise SkillExtractorError("LLM job output is missing 'must_have_skills' / 'good_to_have_skills'.")

    must = _canonical(data.get("must_have_skills"), vocabulary)
    nice = [s for s in _canonical(data.get("good_to_have_skills"), vocabulary) if s not in must]
    exp = data.get("experience_requirements")
    exp = exp if isinstance(exp, dict) else {}

    return JobSkillProfile(
        must_have=tuple(must),
        good_to_have=tuple(nice),
        skills_by_category=_categories(data, vocabulary),
        minimum_years=_as_float(exp.get("minimum_years")),
        preferred_years=_as_float(exp.get("preferred_years")),
        seniority_level=ExperienceLevel.coerce(exp.get("seniority_level")),
        required_certifications=_as_strings(data.get("required_certifications")),
        preferred_qualifications=_as_strings(data.get("preferred_qualifications")),
    )


# ----------------------------------------------------------------------
# Single provider
# ----------------------------------------------------------------------

class LLMSkillExtractor:
    """
    Calls one provider/model to turn resume or job text into a skill profile.

    anthropic uses its own SDK; openai, openrouter and ollama all go through the
    OpenAI client (the latter two with a base_url). Ollama needs no key.
    """

    def __init__(
            self,
            *,
            api_key: Optional[str],
            provider: str = "openai",
            model: Optional[str] = None,
            timeout_seconds: Optional[int] = None,
            vocabulary: Optional[SkillVocabulary] = None,
    ) -> None:
        self._provider = (provider or "").strip().lower()
        if self._provider not in _config.SUPPORTED_PROVIDERS:
            raise SkillExtractorError(
                f"Unsupported provider '{self._provider}'. Use one of: {', '.join(_config.SUPPORTED_PROVIDERS)}."
            )
        if not api_key and self._provider != "ollama":
            raise SkillExtractorError(f"Missing API key for provider: {self._provider}")
        self._api_key = api_key or "ollama"
        self._model = (model or _config.ai_model(self._provider)).strip()
        self._timeout = timeout_seconds or _config.ai_timeout_seconds()
        self._vocabulary = vocabulary

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract_resume(self, resume_text: str) -> ResumeSkillProfile:
        raw = self._complete(RESUME_SYSTEM_PROMPT, build_resume_prompt(resume_text))
        return resume_profile_from_json(parse_json_object(raw), self._vocabulary)

    def extract_job(self, job_text: str, job_title: str = "") -> JobSkillProfile:
        raw = self._complete(JOB_SYSTEM_PROMPT, build_job_prompt(job_text, job_title))
        return job_profile_from_json(parse_json_object(raw), self._vocabulary)

    def _complete(self, system: str, prompt: str) -> str:
        """
        Raises SkillExtractorError on any failure.
        The API key is never included in the exception message.
        """
        try:
            if self._provider == "anthropic":
                return self._call_anthropic(system, prompt)
            return self._call_openai_compatible(system, prompt)
        except SkillExtractorError:
            raise
        except Exception as exc:
            # Sanitize: never let the key propagate through exception messages
            raise SkillExtractorError(f"LLM call failed: {type(exc).__name__}") from None

    # ------------------------------------------------------------------
    # Provider implementations
    # ------------------------------------------------------------------

    def _call_anthropic(self, system: str, prompt: str) -> str:
        if anthropic is None:
            raise SkillExtractorError(
                "Package 'anthropic' is not installed. Run: pip install anthropic"
            )

        client = anthropic.Anthropic(api_key=self._api_key)
        try:
            message = client.messages.create(
                model=self._model,
                max_tokens=_MAX_TOKENS,
                temperature=_TEMPERATURE,
                timeout=self._timeout,
                system=system,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APITimeoutError:
            raise SkillExtractorError(f"Anthropic API timed out after {self._timeout} seconds.") from None
        except anthropic.APIError as exc:
            raise SkillExtractorError(f"Anthropic API error: {type(exc).__name__}") from None

        for block in message.content:
            if block.type == "text":
                return block.text
        raise SkillExtractorError("Anthropic returned no text content.")

    def _client_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"api_key": self._api_key, "timeout": self._timeout}
        if self._provider == "openrouter":
            kwargs["base_url"] = _config.OPENROUTER_BASE_URL
            kwargs["default_headers"] = {"X-Title": "skillmatch"}
        elif self._provider == "ollama":
            kwargs["base_url"] = _config.ollama_base_url() + "/v1"
        return kwargs

    def _call_openai_compatible(self, system: str, prompt: str) -> str:
        if openai is None:
            raise SkillExtractorError(
                "Package 'openai' is not installed. Run: pip install openai"
            )

        client = openai.OpenAI(**self._client_kwargs())
        try:
            response = client.chat.completions.create(
                model=self._model,
                max_tokens=_MAX_TOKENS,
                temperature=_TEMPERATURE,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
            )
        except openai.APITimeoutError:
            raise SkillExtractorError(f"{self._provider} API timed out after {self._timeout} seconds.") from None
        except openai.APIError as exc:
            raise SkillExtractorError(f"{self._provider} API error: {type(exc).__name__}") from None

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise SkillExtractorError(f"{self._provider} returned empty content.")
        return content


# ----------------------------------------------------------------------
# Failover chain
# ----------------------------------------------------------------------

def _is_transient_error(err: Exception) -> bool:
    msg = (str(err) or "").lower()
    return any(h in msg for h in TRANSIENT_HINTS)


def _sleep_backoff(attempt: int) -> None:
    # attempt=0 -> ~0.8s, attempt=1 -> ~1.6s, with jitter
    base = 0.8 * (2 ** attempt)
    jitter = random.uniform(0.0, 0.25)
    time.sleep(base + jitter)


@dataclass
class FailoverState:
    consecutive_failures: int = 0
    disabled: bool = False
    disabled_reason: Optional[str] = None
    # Stick to the first successful candidate within a run
    sticky_provider: Optional[str] = None
    sticky_model: Optional[str] = None


class FailoverSkillExtractor:
    """
    Wraps LLMSkillExtractor with:
    - a provider/model chain tried in order
    - retries for transient errors (rate limit / overloaded / timeout)
    - a circuit breaker after N consecutive candidate failures
    - sticky success (don't flap once one candidate works)
    """

    def __init__(
            self,
            *,
            api_key_resolver: Callable[[str], Optional[str]],
            candidates: Iterable[Tuple[str, str]],
            max_retries: int = 2,
            breaker_consecutive_fails: int = 2,
            timeout_seconds: Optional[int] = None,
            vocabulary: Optional[SkillVocabulary] = None,
    ) -> None:
        self._api_key_resolver = api_key_resolver
        self._candidates = list(candidates)
        self._max_retries = max(0, max_retries)
        self._breaker_fails = max(1, breaker_consecutive_fails)
        self._timeout = timeout_seconds
        self._vocabulary = vocabulary
        self._state = FailoverState()

    @classmethod
    def from_config(cls, vocabulary: Optional[SkillVocabulary] = None) -> "FailoverSkillExtractor":
        cfg = _config.load_llm_failover_config()
        return cls(
            api_key_resolver=_config.resolve_api_key,
            candidates=cfg.chain,
            max_retries=cfg.max_retries,
            breaker_consecutive_fails=cfg.breaker_consecutive_fails,
            timeout_seconds=cfg.timeout_seconds,
            vocabulary=vocabulary,
        )

    def is_disabled(self) -> bool:
        return self._state.disabled

    def _disable(self, reason: str) -> None:
        self._state.disabled = True
        self._state.disabled_reason = reason
        logger.warning("AI extraction disabled for this run: %s", reason)

    def extract_resume(self, resume_text: str) -> ResumeSkillProfile:
        return self._run(lambda ex: ex.extract_resume(resume_text))

    def extract_job(self, job_text: str, job_title: str = "") -> JobSkillProfile:
        return self._run(lambda ex: ex.extract_job(job_text, job_title))

    def _run(self, call: Callable[[LLMSkillExtractor], Any]) -> Any:
        if self._state.disabled:
            raise SkillExtractorError(f"AI extraction disabled: {self._state.disabled_reason}")

        last_err: Optional[Exception] = None

        for provider, model in self._ordered_candidates():
            try:
                extractor = LLMSkillExtractor(
                    api_key=self._api_key_resolver(provider),
                    provider=provider,
                    model=model,
                    timeout_seconds=self._timeout,
                    vocabulary=self._vocabulary,
                )
            except SkillExtractorError as e:
                # Misconfigured candidate (no key / unknown provider): skip without counting
                last_err = e
                continue

            for attempt in range(self._max_retries + 1):
                try:
                    out = call(extractor)

                    self._state.consecutive_failures = 0
                    self._state.sticky_provider = provider
                    self._state.sticky_model = model
                    return out

                except SkillExtractorError as e:
                    last_err = e
                    if _is_transient_error(e) and attempt < self._max_retries:
                        _sleep_backoff(attempt)
                        continue
                    break

            logger.info("AI candidate %s/%s failed: %s", provider, model, last_err)
            self._state.consecutive_failures += 1
            if self._state.consecutive_failures >= self._breaker_fails:
                self._disable(f"circuit-breaker tripped after {self._state.consecutive_failures} failures")
                break

        if last_err is None:
            last_err = SkillExtractorError("AI extraction failed: no candidates available")
        raise last_err

    def _ordered_candidates(self) -> List[Tuple[str, str]]:
        if self._state.sticky_provider and self._state.sticky_model:
            sticky = (self._state.sticky_provider, self._state.sticky_model)
            rest = [c for c in self._candidates if c != sticky]
            return [sticky] + rest
        return list(self._candidates)
