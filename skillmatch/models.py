from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class ExtractionMethod(str, Enum):
    AI = "ai"
    DICTIONARY = "dictionary"                    # AI not configured / not requested
    DICTIONARY_FALLBACK = "dictionary_fallback"  # AI attempted and failed


class ExperienceLevel(str, Enum):
    JUNIOR = "junior"
    MID = "mid"
    SENIOR = "senior"
    EXPERT = "expert"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, raw: Any) -> "ExperienceLevel":
        value = str(raw or "").strip().lower()
        for member in cls:
            if member.value == value:
                return member
        return cls.UNKNOWN


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_whitespace(text: str) -> str:
    return " ".join((text or "").split()).strip()


def parse_dt(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        # handle trailing Z
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class ResumeIdentity:
    """
    Coarse fingerprint of which resume was used: file name + byte size.
    Not a content hash, so the same text uploaded under another name is a different identity.
    """
    filename: str
    file_size_bytes: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "filename", (self.filename or "").strip())
        object.__setattr__(self, "file_size_bytes", int(self.file_size_bytes or 0))

    def cache_token(self) -> str:
        return f"{self.filename}_{self.file_size_bytes}"

    def to_dict(self) -> Dict[str, Any]:
        return {"filename": self.filename, "fileSize": self.file_size_bytes}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["ResumeIdentity"]:
        if not data:
            return None
        filename = data.get("filename")
        size = data.get("fileSize", data.get("file_size_bytes"))
        if not filename:
            return None
        return cls(filename=str(filename), file_size_bytes=int(size or 0))


@dataclass(frozen=True)
class JobPosting:
    """The job side of an analysis, as scraped by whatever surface sits in front of the core."""
    url: str
    title: str
    description: str
    company: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", (self.url or "").strip())
        object.__setattr__(self, "title", normalize_whitespace(self.title))
        if self.company is not None:
            object.__setattr__(self, "company", normalize_whitespace(self.company))

    @property
    def text(self) -> str:
        return f"{self.title}\n{self.description or ''}".strip()


@dataclass(frozen=True)
class ResumeSkillProfile:
    """Resume-side output of a skill extractor (AI or dictionary)."""
    expert: Tuple[str, ...] = ()
    proficient: Tuple[str, ...] = ()
    familiar: Tuple[str, ...] = ()
    skills_by_category: Dict[str, List[str]] = field(default_factory=dict)
    experience_level: ExperienceLevel = ExperienceLevel.UNKNOWN
    years_of_experience: float = 0.0
    certifications: Tuple[str, ...] = ()
    education: str = "unknown"

    @property
    def all_skills(self) -> List[str]:
        out: List[str] = []
        for s in (*self.expert, *self.proficient, *self.familiar):
            if s and s not in out:
                out.append(s)
        return out

    def proficiency_of(self, skill: str) -> Optional[str]:
        for level in ("expert", "proficient", "familiar"):
            if skill in getattr(self, level):
                return level
        return None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["experience_level"] = self.experience_level.value
        return d


@dataclass(frozen=True)
class JobSkillProfile:
    """Job-side output of a skill extractor (AI or dictionary)."""
    must_have: Tuple[str, ...] = ()
    good_to_have: Tuple[str, ...] = ()
    skills_by_category: Dict[str, List[str]] = field(default_factory=dict)
    minimum_years: float = 0.0
    preferred_years: float = 0.0
    seniority_level: ExperienceLevel = ExperienceLevel.UNKNOWN
    required_certifications: Tuple[str, ...] = ()
    preferred_qualifications: Tuple[str, ...] = ()

    @property
    def all_skills(self) -> List[str]:
        out: List[str] = []
        for s in (*self.must_have, *self.good_to_have):
            if s and s not in out:
                out.append(s)
        return out

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["seniority_level"] = self.seniority_level.value
        return d


@dataclass(frozen=True)
class ExtractionResult:
    """
    Discriminated extraction outcome. Downstream code branches on `method`,
    never on the shape of `data`.
    """
    method: ExtractionMethod
    data: Union[ResumeSkillProfile, JobSkillProfile]
    error: Optional[str] = None  # sanitized reason when method == DICTIONARY_FALLBACK

    @property
    def ai_used(self) -> bool:
        return self.method == ExtractionMethod.AI

    def to_dict(self) -> Dict[str, Any]:
        return {
            "extraction_method": self.method.value,
            "data": self.data.to_dict(),
            "error": self.error,
        }


@dataclass(frozen=True)
class CachedAnalysis:
    """
    One persisted analysis. Owned by the analysis store; callers replace, never mutate.
    """
    key: str
    url: str
    created_at: Optional[datetime]
    saved_at: Optional[datetime]
    analysis_data: Dict[str, Any]
    version: str = "1.0"

    def to_record(self) -> Dict[str, Any]:
        """On-disk layout."""
        return {
            "url": self.url,
            "timestamp": self.created_at.isoformat() if self.created_at else None,
            "analysisData": self.analysis_data,
            "metadata": {
                "savedAt": self.saved_at.isoformat() if self.saved_at else None,
                "version": self.version,
                "fileFormat": "skillmatch-analysis-v1",
            },
        }

    @classmethod
    def from_record(cls, key: str, record: Dict[str, Any]) -> "CachedAnalysis":
        """Raises ValueError / KeyError / TypeError on a malformed record."""
        if not isinstance(record, dict):
            raise ValueError("record is not a JSON object")
        analysis_data = record["analysisData"]
        if not isinstance(analysis_data, dict):
            raise ValueError("analysisData is not a JSON object")
        meta = record.get("metadata") or {}
        if not isinstance(meta, dict):
            raise ValueError("metadata is not a JSON object")
        created = parse_dt(record.get("timestamp"))
        return cls(
            key=key,
            url=str(record["url"]),
            created_at=created,
            saved_at=parse_dt(meta.get("savedAt")) or created,
            analysis_data=analysis_data,
            version=str(meta.get("version") or "1.0"),
        )
