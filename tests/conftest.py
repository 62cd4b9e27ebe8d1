from pathlib import Path
import pytest

from skillmatch.models import JobPosting, ResumeIdentity

# Path to tests/fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

SAMPLE_JOB_URL = "https://jobs.example.com/postings/123?ref=feed"


@pytest.fixture
def fixtures_dir() -> Path:
    """
    Exposes the fixtures directory in case a test needs direct file access.
    """
    return FIXTURES_DIR


@pytest.fixture
def load_text(fixtures_dir):
    """
    Fixture that returns a function: load_text("file.ext") -> str
    This avoids repeating file reading logic in every test file.
    """
    def _load(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")
    return _load


@pytest.fixture
def sample_job(load_text) -> JobPosting:
    """Senior role: React + TypeScript + PostgreSQL required, Docker a plus."""
    return JobPosting(
        url=SAMPLE_JOB_URL,
        title="Senior Engineer",
        description=load_text("sample_job.txt"),
        company="Example Co",
    )


@pytest.fixture
def sample_identity() -> ResumeIdentity:
    return ResumeIdentity(filename="resume.pdf", file_size_bytes=2048)
