"""
skillmatch/llm/prompt.py

System + user prompts for structured skill extraction.

Both prompts ask for a single JSON object; the extractor validates the shape
and normalizes skill names itself, so the prompts only need to be explicit
about structure and the must-have / good-to-have distinction.
"""
from __future__ import annotations

from skillmatch.config import AI_MAX_INPUT_CHARS

_CATEGORY_SHAPE = """\
  "skills_by_category": {
    "programming_languages": [],
    "frameworks": [],
    "databases": [],
    "cloud_platforms": [],
    "tools": [],
    "other": []
  }"""

RESUME_SYSTEM_PROMPT = f"""\
You are an expert resume parser that extracts technical skills from candidate profiles.
Identify every technical skill, group it by proficiency (expert, proficient, familiar) and by domain, \
and extract years of experience, certifications and education.
Return ONLY a JSON object with this exact structure:
{{
  "technical_skills": {{"expert": [], "proficient": [], "familiar": []}},
{_CATEGORY_SHAPE},
  "experience_level": "junior|mid|senior|expert",
  "years_of_experience": 0,
  "certifications": [],
  "education": "degree level"
}}
Rules:
- Technical skills only; ignore soft skills such as "communication" or "leadership".
- Normalize skill names ("JS" -> "javascript") and use lowercase.
- Be conservative with proficiency levels.
- Use empty arrays for categories with no skills.\
"""

JOB_SYSTEM_PROMPT = f"""\
You are an expert job requirements analyzer that extracts technical skill requirements from job descriptions.
Separate required skills from preferred ones and extract experience and seniority requirements.
Return ONLY a JSON object with this exact structure:
{{
  "must_have_skills": [],
  "good_to_have_skills": [],
{_CATEGORY_SHAPE},
  "experience_requirements": {{
    "minimum_years": 0,
    "preferred_years": 0,
    "seniority_level": "junior|mid|senior|expert"
  }},
  "required_certifications": [],
  "preferred_qualifications": []
}}
Rules:
- "required", "must have", "essential" -> must_have_skills.
- "preferred", "nice to have", "plus", "bonus" -> good_to_have_skills.
- Normalize skill names consistently and use lowercase.
- If the description starts with "EXPERIENCE REQUIRED: X - Y years", use X as minimum_years and Y as \
preferred_years and ignore other experience mentions.\
"""


def _clip(text: str, limit: int = AI_MAX_INPUT_CHARS) -> str:
    text = (text or "").strip()
    if len(text) <= limit:
        return text
    return text[:limit] + " ...[truncated]"


def build_resume_prompt(resume_text: str) -> str:
    return f"""\
Analyze the following resume and extract technical skills in the specified JSON format.

RESUME TEXT:
{_clip(resume_text)}

Focus on programming languages and proficiency, frameworks and libraries, databases, \
cloud platforms and DevOps tools, years of experience with specific technologies, \
and technical certifications.\
"""


def build_job_prompt(job_text: str, job_title: str = "") -> str:
    return f"""\
Analyze the following job description and extract technical skill requirements in the specified JSON format.

JOB TITLE: {(job_title or "").strip() or "(not given)"}

JOB DESCRIPTION:
{_clip(job_text)}

Pay attention to wording that signals importance:
- Required / Must have / Essential -> must_have_skills
- Preferred / Nice to have / Plus / Bonus -> good_to_have_skills\
"""
