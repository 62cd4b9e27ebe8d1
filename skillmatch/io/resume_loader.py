from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from skillmatch.models import ResumeIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedResume:
    text: str
    source: str  # "text" | "pdf" | "none"
    path: Optional[str] = None
    # Filename + byte size of the file the text came from; None for inline text
    identity: Optional[ResumeIdentity] = None


def identity_for(path: Path) -> ResumeIdentity:
    return ResumeIdentity(filename=path.name, file_size_bytes=path.stat().st_size)


def _read_pdf(p: Path) -> str:
    reader = PdfReader(str(p))
    parts = []
    for page in reader.pages:
        t = page.extract_text() or ""
        if t.strip():
            parts.append(t)
    return "\n".join(parts).strip()


def load_resume(path: Optional[str]) -> LoadedResume:
    """
    Load resume content from a local .txt/.md or .pdf file (picked by suffix).

    Best-effort: unreadable files return source='none' and empty text; the
    analysis layer then rejects the request as insufficient input.
    """
    if not path:
        return LoadedResume(text="", source="none", path=None)

    p = Path(path)
    try:
        identity = identity_for(p)
    except OSError as e:
        logger.warning("Resume file %s is not readable: %s", p, e)
        return LoadedResume(text="", source="none", path=str(p))

    if p.suffix.lower() == ".pdf":
        try:
            text = _read_pdf(p)
        except (OSError, PyPdfError) as e:
            logger.warning("Failed to extract text from %s: %s", p.name, e)
            return LoadedResume(text="", source="none", path=str(p), identity=identity)
        if not text:
            return LoadedResume(text="", source="none", path=str(p), identity=identity)
        return LoadedResume(text=text, source="pdf", path=str(p), identity=identity)

    try:
        return LoadedResume(text=p.read_text(encoding="utf-8"), source="text", path=str(p), identity=identity)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read %s: %s", p.name, e)
        return LoadedResume(text="", source="none", path=str(p), identity=identity)
