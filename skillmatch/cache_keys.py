from __future__ import annotations

import hashlib
import re
from typing import Optional
from urllib.parse import urlparse

from skillmatch.models import ResumeIdentity

UNKNOWN_HOST = "unknown-host"

URL_HASH_LEN = 32
SEGMENT_HASH_LEN = 8

_UNSAFE_HOST_CHARS_RE = re.compile(r"[^\w\-]")


def _sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _host_slug(url: str) -> str:
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    if not host:
        return UNKNOWN_HOST
    return _UNSAFE_HOST_CHARS_RE.sub("_", host.replace(".", "_"))


def job_key_prefix(url: str) -> str:
    """
    URL-derived part shared by every analysis of one job:
    <hostname, dots -> underscores>_<sha256(url)[:32]>
    """
    url = (url or "").strip()
    return f"{_host_slug(url)}_{_sha256_hex(url)[:URL_HASH_LEN]}"


def compute_cache_key(
        url: str,
        resume_identity: Optional[ResumeIdentity] = None,
        job_description: Optional[str] = None,
) -> str:
    """
    Deterministic storage key for one (job, resume, description) combination.

    - resume identity adds _<sha256("filename_size")[:8]>
    - a non-empty job description adds _<sha256(description)[:8]>, so an
      edited posting gets a fresh key and the old analysis is never served

    Short hashes make collisions possible in principle; that is acceptable for
    a local cache. The key is never stored on its own: recompute it.
    """
    key = job_key_prefix(url)
    if resume_identity is not None:
        key += "_" + _sha256_hex(resume_identity.cache_token())[:SEGMENT_HASH_LEN]
    if job_description:
        key += "_" + _sha256_hex(job_description)[:SEGMENT_HASH_LEN]
    return key
