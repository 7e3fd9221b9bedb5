"""
AI Coach Service - prompt building and response shaping.

Every capability turns the caller's profile into a short text summary,
adds the caller's input and relays the model's answer. Structured answers
are parsed and validated against the response schemas; anything the model
gets wrong becomes a ServiceUnavailable with the detail logged.
"""

import json
from typing import List, Optional

from openai import OpenAIError
from pydantic import ValidationError

from careerflow.core.exceptions import ServiceUnavailable
from careerflow.core.logging_config import get_logger
from careerflow.schemas.schemas import (
    CareerPathTreeResponse,
    CareerPathsResponse,
    FitScoreResponse,
    ResumeFeedbackResponse,
)
from careerflow.services.coach_client import CoachClient

logger = get_logger(__name__)

UNAVAILABLE = "AI service is temporarily unavailable. Please try again."

CAREER_PATH_COUNT = 3
MIN_TREE_STEPS = 4
MAX_TREE_STEPS = 6
MAX_RESUME_CHARS = 20000


# ============================================================
# PROFILE SUMMARY
# ============================================================

def build_profile_context(user: dict) -> str:
    """Textual profile summary. Empty fields are left out."""
    p = user.get("profile") or {}

    edu = "; ".join(
        ", ".join(filter(None, [e.get("degree"), e.get("field_of_study"), e.get("institution")]))
        for e in p.get("education") or []
    ).strip("; ")
    exp = "; ".join(
        " - ".join(filter(None, [e.get("title"), e.get("company"), e.get("description")]))
        for e in p.get("experience") or []
    ).strip("; ")

    lines = [
        f"Name: {user.get('full_name', '')}",
        f"Bio: {p['bio']}" if p.get("bio") else None,
        f"Location: {p['location']}" if p.get("location") else None,
        f"Skills: {', '.join(p['skills'])}" if p.get("skills") else None,
        f"Career Interests: {', '.join(p['career_interests'])}" if p.get("career_interests") else None,
        f"Education: {edu}" if edu else None,
        f"Experience: {exp}" if exp else None,
    ]
    return "\n".join(line for line in lines if line)


def with_profile(profile_context: str, body: str) -> str:
    if not profile_context:
        return body
    return f"[User Profile]\n{profile_context}\n\n{body}"


# ============================================================
# PROMPTS
# ============================================================

CAREER_PATHS_PROMPT = """Analyze this person's profile and generate exactly 3 personalized career path recommendations, ranked best fit first.

Return ONLY a valid JSON object (no markdown, no code fences) with this structure:
{
  "paths": [
    {
      "title": "Role title (e.g. Data Analyst)",
      "fit_score": <number 0-100>,
      "salary_range": "estimated salary band",
      "description": "1-2 sentence description of the role and why it fits",
      "skills_to_learn": ["skill1", "skill2", "skill3"],
      "recommended_course": {"name": "Course or certification name", "reason": "One sentence why"},
      "steps": ["Step 1", "Step 2", "Step 3", "Step 4"]
    }
  ]
}

Tailor fit scores honestly based on the user's current skills and experience.
If the profile is sparse, base recommendations on their career interests and suggest foundational paths."""

RESUME_PROMPT = """[Resume]
{resume}

Analyze this resume for ATS compatibility. Provide:
1. An overall score (0-100)
2. Three specific strengths
3. Three specific improvements
4. Keyword suggestions for their target roles

Return ONLY valid JSON (no markdown fences):
{{ "score": <number>, "strengths": ["..."], "improvements": ["..."], "keywords": ["..."] }}"""

FIT_SCORE_PROMPT = """[Job Description]
{job_description}

Analyze this user's fit for the job described above.

Return ONLY valid JSON (no markdown fences):
{{
  "score": <number 0-100>,
  "matched_skills": ["skill1", "skill2"],
  "missing_skills": ["skill1", "skill2"],
  "reason": "2-3 sentence explanation",
  "tips": ["tip 1", "tip 2", "tip 3"]
}}"""

PATH_TREE_PROMPT = """The user wants to become a "{goal_role}".

Generate a career trajectory from their current position to "{goal_role}".
Include 4-6 steps, each representing a role on the path.

Return ONLY valid JSON (no markdown fences):
{{
  "goal_role": {goal_role_json},
  "nodes": [
    {{
      "step": 1,
      "role": "Current / Entry role",
      "avg_salary": "estimated salary band",
      "years_in_role": "1-2 years",
      "key_skills": ["skill1", "skill2"],
      "certifications": ["cert1 (optional)"],
      "responsibilities": ["responsibility1", "responsibility2"]
    }}
  ],
  "estimated_total_years": "X-Y years",
  "advice": "1-2 sentence personalized advice"
}}"""


# ============================================================
# SERVICE
# ============================================================

class CoachService:
    """
    The five coaching capabilities over an injected CoachClient.
    """

    def __init__(self, client: CoachClient):
        self.client = client

    def _structured(self, capability: str, prompt: str, schema):
        try:
            raw = self.client.generate_json(prompt)
            return schema.model_validate(raw)
        except (OpenAIError, ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error("AI %s failed: %s", capability, e)
            raise ServiceUnavailable(UNAVAILABLE, detail=str(e))

    def chat(self, user: dict, message: str, history: Optional[List[dict]] = None, context: str = "") -> str:
        profile_ctx = "\n\n".join(filter(None, [build_profile_context(user), context]))
        prompt = (
            f"[User Profile]\n{profile_ctx}\n\n[User Message]\n{message}"
            if profile_ctx else message
        )
        try:
            return self.client.chat(prompt, history or [])
        except OpenAIError as e:
            logger.error("AI chat failed: %s", e)
            raise ServiceUnavailable(UNAVAILABLE, detail=str(e))

    def career_paths(self, user: dict) -> dict:
        prompt = with_profile(build_profile_context(user), CAREER_PATHS_PROMPT)
        result = self._structured("career paths", prompt, CareerPathsResponse)

        if len(result.paths) < CAREER_PATH_COUNT:
            logger.error("AI career paths returned %d paths", len(result.paths))
            raise ServiceUnavailable(UNAVAILABLE, detail=f"expected {CAREER_PATH_COUNT} paths")

        ranked = sorted(result.paths, key=lambda p: p.fit_score, reverse=True)[:CAREER_PATH_COUNT]
        return {"paths": [p.model_dump() for p in ranked]}

    def resume_feedback(self, user: dict, resume_text: str) -> dict:
        body = RESUME_PROMPT.format(resume=resume_text[:MAX_RESUME_CHARS])
        prompt = with_profile(build_profile_context(user), body)
        return self._structured("resume feedback", prompt, ResumeFeedbackResponse).model_dump()

    def fit_score(self, user: dict, job_description: str) -> dict:
        body = FIT_SCORE_PROMPT.format(job_description=job_description)
        prompt = with_profile(build_profile_context(user), body)
        return self._structured("fit score", prompt, FitScoreResponse).model_dump()

    def career_path_tree(self, user: dict, goal_role: str) -> dict:
        body = PATH_TREE_PROMPT.format(goal_role=goal_role, goal_role_json=json.dumps(goal_role))
        prompt = with_profile(build_profile_context(user), body)
        result = self._structured("career path tree", prompt, CareerPathTreeResponse)

        if len(result.nodes) < MIN_TREE_STEPS:
            logger.error("AI career path tree returned %d steps", len(result.nodes))
            raise ServiceUnavailable(UNAVAILABLE, detail=f"expected at least {MIN_TREE_STEPS} steps")

        nodes = sorted(result.nodes, key=lambda n: n.step)[:MAX_TREE_STEPS]
        data = result.model_dump()
        data["nodes"] = [n.model_dump() for n in nodes]
        return data
