from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from skillmatch.config import ADDED_SKILLS_FILENAME
from skillmatch.models import utc_now
from skillmatch.store import AnalysisStore

logger = logging.getLogger(__name__)


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


@dataclass
class AddedSkills:
    # Parallel lists: skills[i] was added at added_at[i]
    skills: List[str] = field(default_factory=list)
    added_at: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"skills": list(self.skills), "addedAt": list(self.added_at)}


class AddedSkillsRepository:
    """
    Skills the user declared by hand ("I do know Terraform"). They are merged
    into the resume side of every analysis.

    Layout:
      <base_dir>/
        added_skills.json -> {"skills": [...], "addedAt": [...]}

    A missing file is an empty list. A corrupt file raises (json.JSONDecodeError):
    this is user data, not a cache, so it is never silently discarded.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)
        self.path = self.base_dir / ADDED_SKILLS_FILENAME

    def load(self) -> AddedSkills:
        if not self.path.exists():
            return AddedSkills()
        raw_text = self.path.read_text(encoding="utf-8").strip()
        if not raw_text:
            return AddedSkills()
        data = json.loads(raw_text)
        skills = [str(s) for s in data.get("skills") or []]
        added_at = [str(t) for t in data.get("addedAt") or []]
        return AddedSkills(skills=skills, added_at=added_at)

    def skills(self) -> List[str]:
        return self.load().skills

    def _write(self, added: AddedSkills) -> None:
        _ensure_dir(self.base_dir)
        self.path.write_text(json.dumps(added.to_dict(), indent=2), encoding="utf-8")
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            pass

    def add(
            self,
            skill: str,
            *,
            job_url: Optional[str] = None,
            store: Optional[AnalysisStore] = None,
    ) -> Dict[str, Any]:
        """
        Add one skill (trimmed, lowercased). When job_url and store are given,
        every cached analysis of that job is dropped so the next run sees the
        new skill.

        Raises ValueError for a blank skill.
        """
        name = " ".join((skill or "").split()).lower()
        if not name:
            raise ValueError("skill must not be empty")

        added = self.load()
        if name in added.skills:
            return {"skill": name, "alreadyExists": True, "totalSkills": len(added.skills), "cacheCleared": 0}

        added.skills.append(name)
        added.added_at.append(utc_now().isoformat())
        self._write(added)
        logger.info("Added skill %r (total %d)", name, len(added.skills))

        cleared = 0
        if job_url and store is not None:
            cleared = store.delete_all_for_job(job_url)

        return {"skill": name, "alreadyExists": False, "totalSkills": len(added.skills), "cacheCleared": cleared}
