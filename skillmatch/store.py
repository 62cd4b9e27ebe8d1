from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from skillmatch.cache_keys import compute_cache_key, job_key_prefix
from skillmatch.config import ANALYSIS_SUBDIR, RECORD_FORMAT_VERSION
from skillmatch.models import CachedAnalysis, ResumeIdentity, utc_now

logger = logging.getLogger(__name__)

RECORD_SUFFIX = ".json"


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _best_effort_lockdown_file_permissions(path: Path) -> None:
    """
    Best-effort privacy: on Unix, set 600. On Windows, no-op.
    """
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def match_score_of(analysis_data: Dict[str, Any]) -> int:
    """Headline score of a stored payload, 0 when it carries none."""
    for key in ("weightedMatchPercentage", "matchPercentage"):
        value = analysis_data.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return int(value)
    return 0


def payload_metadata(analysis_data: Dict[str, Any]) -> Dict[str, Any]:
    meta = analysis_data.get("metadata")
    return meta if isinstance(meta, dict) else {}


class AnalysisStore(Protocol):
    def save(
            self,
            url: str,
            payload: Dict[str, Any],
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> bool:
        ...

    def load(
            self,
            url: str,
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> Optional[CachedAnalysis]:
        ...

    def exists(
            self,
            url: str,
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        ...

    def delete(
            self,
            url: str,
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> bool:
        ...

    def delete_all_for_job(self, url: str) -> int:
        ...

    def list_for_job(self, url: str) -> List[CachedAnalysis]:
        ...

    def list_all(self) -> List[CachedAnalysis]:
        ...


class JsonAnalysisStore:
    """
    One JSON file per cache key.

    Layout:
      <base_dir>/
        analyses/
          <cache_key>.json -> {"url", "timestamp", "analysisData", "metadata": {...}}

    Every public method swallows I/O and decode errors after logging them and
    answers False / None / [] instead: a broken cache must never fail an analysis.
    Writes go to a temp file in the same directory and are moved into place
    with os.replace, so readers never see half a record. Concurrent writers
    for one key: last writer wins.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)
        self.analyses_dir = self.base_dir / ANALYSIS_SUBDIR

    def path_for(
            self,
            url: str,
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> Path:
        return self.analyses_dir / (compute_cache_key(url, resume_identity, job_description) + RECORD_SUFFIX)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _read(self, path: Path) -> CachedAnalysis:
        """Raises OSError / ValueError / KeyError / TypeError."""
        record = json.loads(path.read_text(encoding="utf-8"))
        return CachedAnalysis.from_record(path.stem, record)

    def _write_atomic(self, path: Path, record: Dict[str, Any]) -> None:
        _ensure_dir(path.parent)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, sort_keys=True)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
        _best_effort_lockdown_file_permissions(path)

    def _record_paths(self) -> List[Path]:
        if not self.analyses_dir.is_dir():
            return []
        return [p for p in self.analyses_dir.iterdir() if p.is_file() and p.suffix == RECORD_SUFFIX]

    def _read_many(self, paths: List[Path]) -> List[CachedAnalysis]:
        out: List[CachedAnalysis] = []
        for path in paths:
            try:
                out.append(self._read(path))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable analysis record %s: %s", path.name, e)
        out.sort(key=lambda a: a.saved_at.timestamp() if a.saved_at else 0.0, reverse=True)
        return out

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def save(
            self,
            url: str,
            payload: Dict[str, Any],
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> bool:
        """Write (or fully replace) the record for this key. True on success."""
        if not isinstance(payload, dict):
            logger.warning("Refusing to save analysis for %s: payload is not a JSON object", url)
            return False
        path = self.path_for(url, resume_identity, job_description)
        now = utc_now()
        entry = CachedAnalysis(
            key=path.stem,
            url=url,
            created_at=now,
            saved_at=now,
            analysis_data=payload,
            version=RECORD_FORMAT_VERSION,
        )
        try:
            self._write_atomic(path, entry.to_record())
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to save analysis for %s: %s", url, e)
            return False
        logger.info("Saved analysis %s", path.stem)
        return True

    def load(
            self,
            url: str,
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> Optional[CachedAnalysis]:
        path = self.path_for(url, resume_identity, job_description)
        if not path.exists():
            return None
        try:
            return self._read(path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to load analysis %s: %s", path.name, e)
            return None

    def exists(
            self,
            url: str,
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Summary metadata of the stored record, or None when there is none (or it is unreadable)."""
        path = self.path_for(url, resume_identity, job_description)
        if not path.exists():
            return None
        try:
            entry = self._read(path)
            size = path.stat().st_size
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to inspect analysis %s: %s", path.name, e)
            return None

        meta = payload_metadata(entry.analysis_data)
        return {
            "exists": True,
            "lastAnalyzed": entry.created_at.isoformat() if entry.created_at else None,
            "savedAt": entry.saved_at.isoformat() if entry.saved_at else None,
            "aiEnabled": bool(meta.get("aiEnabled", False)),
            "analysisMethod": meta.get("analysisMethod") or "unknown",
            "matchScore": match_score_of(entry.analysis_data),
            "fileSize": size,
        }

    def delete(
            self,
            url: str,
            resume_identity: Optional[ResumeIdentity] = None,
            job_description: Optional[str] = None,
    ) -> bool:
        """True when a record was removed; False when none existed or removal failed."""
        path = self.path_for(url, resume_identity, job_description)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Failed to delete analysis %s: %s", path.name, e)
            return False
        logger.info("Deleted analysis %s", path.stem)
        return True

    def delete_all_for_job(self, url: str) -> int:
        """Remove every record of this job URL (any resume, any description). Returns the count."""
        prefix = job_key_prefix(url)
        removed = 0
        try:
            paths = [p for p in self._record_paths() if p.stem.startswith(prefix)]
        except OSError as e:
            logger.warning("Failed to scan analyses for %s: %s", url, e)
            return 0
        for path in paths:
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Failed to delete analysis %s: %s", path.name, e)
        if removed:
            logger.info("Invalidated %d cached analyses for %s", removed, url)
        return removed

    def list_for_job(self, url: str) -> List[CachedAnalysis]:
        """All readable records for this job URL, newest first."""
        prefix = job_key_prefix(url)
        try:
            paths = [p for p in self._record_paths() if p.stem.startswith(prefix)]
        except OSError as e:
            logger.warning("Failed to scan analyses for %s: %s", url, e)
            return []
        return self._read_many(paths)

    def list_all(self) -> List[CachedAnalysis]:
        """Every readable record, newest first. Malformed files are logged and skipped."""
        try:
            paths = self._record_paths()
        except OSError as e:
            logger.warning("Failed to list analyses: %s", e)
            return []
        return self._read_many(paths)
