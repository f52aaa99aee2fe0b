# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Client for interacting with Large Language Models (LLMs).
Supports Google AI Studio (Gemini) and OpenAI, through their async SDKs.

Serves as the enhancement collaborator, the structuring step of resume
imports, and the ATS scorer used on save.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx
import openai
from google import genai
from google.genai import errors as genai_errors

from resume_sync.config import Settings
from resume_sync.errors import ServiceResponseError, TransportError

# Logger is configured in main.py
logger = logging.getLogger(__name__)

GEMINI_FALLBACK_MODELS = ["gemini-1.5-flash", "gemini-1.5-flash-001", "gemini-pro"]

RESUME_JSON_SHAPE = """
{
    "summary": "Professional summary text",
    "skills": "Skills text",
    "experience": [
        {
            "title": "Role Title",
            "organization": "Company",
            "startDate": "Jan 2020",
            "endDate": "Dec 2022",
            "current": false,
            "description": "What was achieved"
        }
    ],
    "education": [ ...same entry shape... ],
    "projects": [ ...same entry shape... ]
}
"""

SECTION_GUIDELINES = {
    "summary": (
        "Rewrite this professional summary to be concise, specific and impactful. "
        "Keep it to 3-5 sentences in the first person implied (no 'I')."
    ),
    "skills": (
        "Rewrite this skills section so it is well organised and ATS friendly. "
        "Group related skills and keep every skill the candidate listed."
    ),
}


class LLMClient:
    """
    Abstraction layer for LLM providers.
    Handles prompted requests for resume enhancement, import and scoring.
    """
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings.from_env()
        self.provider = self.settings.provider
        if self.provider == "openai":
            self.api_key = self.settings.openai_api_key
        else:
            self.api_key = self.settings.gemini_api_key
        if not self.api_key:
            logger.warning("No API key found. Set GEMINI_API_KEY or OPENAI_API_KEY to enable AI features.")

    async def _call_llm(self, prompt: str) -> str:
        """
        Sends one prompt to the configured provider and returns the raw text.
        Provider failures are translated into ServiceResponseError / TransportError.
        """
        if not self.api_key:
            raise ServiceResponseError(401, "No API key configured. Set GEMINI_API_KEY or OPENAI_API_KEY.")

        # Ensure custom CA bundle is visible to httpx-based SDKs
        self.settings.configure_ssl_env()

        try:
            if self.provider == "openai":
                return await self._call_openai(prompt)
            return await self._call_gemini(prompt)
        except openai.APIStatusError as e:
            retry_after = parse_retry_after(e.response.headers.get("retry-after") if e.response is not None else None)
            raise ServiceResponseError(e.status_code, e.message, retry_after) from e
        except openai.APIConnectionError as e:
            # Includes APITimeoutError
            raise TransportError(f"OpenAI request failed: {e}") from e
        except genai_errors.APIError as e:
            raise ServiceResponseError(e.code or 500, e.message or str(e)) from e
        except httpx.TransportError as e:
            raise TransportError(f"Gemini request failed: {e}") from e

    async def _call_openai(self, prompt: str) -> str:
        async with openai.AsyncOpenAI(api_key=self.api_key, timeout=self.settings.request_timeout) as client:
            response = await client.chat.completions.create(
                model=self.settings.openai_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.7,
            )
        return response.choices[0].message.content or ""

    async def _call_gemini(self, prompt: str) -> str:
        client = genai.Client(api_key=self.api_key)

        models = [self.settings.gemini_model] + [m for m in GEMINI_FALLBACK_MODELS if m != self.settings.gemini_model]
        last_exception = None
        for model_name in models:
            try:
                logger.debug(f"Attempting model: {model_name}")
                response = await client.aio.models.generate_content(model=model_name, contents=prompt)
                return response.text or ""
            except genai_errors.ClientError as e:
                # Only an unknown model is worth another try
                if e.code != 404:
                    raise
                logger.warning(f"Model {model_name} not available: {e}")
                last_exception = e

        raise last_exception

    async def enhance(self, payload: Any, kind: str) -> Dict[str, Any]:
        """
        Enhancement collaborator entry point.
        `kind` is "summary", "skills" or "resume" (whole-document snapshot).
        """
        if kind in SECTION_GUIDELINES:
            prompt = f"""
            You are an expert resume writer. {SECTION_GUIDELINES[kind]}
            Return ONLY the improved text, with no headings, quotes or commentary.

            CURRENT {kind.upper()}:
            {str(payload)[:8000]}
            """
            text = (await self._call_llm(prompt)).strip()
            return {kind: text}

        prompt = f"""
        You are an expert resume writer. Improve the following resume.
        Strengthen the summary, organise the skills, and rewrite every entry
        description with action verbs and measurable outcomes. Never invent
        employers, schools, dates or titles, and keep entries in the same order.

        RESUME (JSON):
        {json.dumps(payload, ensure_ascii=False)[:60000]}

        Return ONLY valid JSON matching this structure. Omit any section you did not change:
        {RESUME_JSON_SHAPE}
        """
        return content_fields(self._parse_fields(await self._call_llm(prompt)))

    async def extract_sections(self, text: str) -> Dict[str, Any]:
        """Structures the raw text of an uploaded resume into resume fields."""
        prompt = f"""
        You are an expert technical recruiter. Extract the sections of the resume below.
        Copy the wording faithfully; do not improve it. Omit any section that is not present.

        Return ONLY valid JSON matching this structure:
        {RESUME_JSON_SHAPE}

        RESUME TEXT:
        {text[:60000]}
        """
        return content_fields(self._parse_fields(await self._call_llm(prompt)))

    async def score_resume(self, text: str) -> Dict[str, Any]:
        """
        Scores a resume for Applicant Tracking System compatibility.
        Returns {"atsScore": int, "feedback": {"strengths": [...], "improvements": [...]}}.
        """
        prompt = f"""
        You are an Applicant Tracking System expert. Score the following resume
        from 0 to 100 for ATS compatibility and list its strengths and the areas
        that need improvement.

        Return ONLY valid JSON in this format:
        {{
            "atsScore": 75,
            "feedback": {{
                "strengths": ["Strength 1"],
                "improvements": ["Improvement 1"]
            }}
        }}

        RESUME:
        {text[:60000]}
        """
        data = self._parse_fields(await self._call_llm(prompt))
        feedback = data.get("feedback") or {}
        try:
            score = int(data.get("atsScore", 0))
        except (TypeError, ValueError) as e:
            raise ServiceResponseError(502, f"Model returned an invalid score: {e}") from e
        return {
            "atsScore": score,
            "feedback": {
                "strengths": _as_list(feedback.get("strengths")),
                "improvements": _as_list(feedback.get("improvements")),
            },
        }

    def _parse_fields(self, raw: str) -> Dict[str, Any]:
        json_str = self._clean_json(raw)
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            logger.error("Failed to decode LLM response as JSON")
            logger.debug(f"Raw response: {json_str}")
            raise ServiceResponseError(502, f"Model returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ServiceResponseError(502, "Model returned JSON that is not an object")
        # Some prompts come back wrapped the same way the web API wraps them
        if set(data) == {"content"} and isinstance(data["content"], dict):
            data = data["content"]
        return data

    def _clean_json(self, text: str) -> str:
        """Helper to strip code fences from LLM output"""
        if "```json" in text:
            text = text.split("```json")[1].split("```")[0]
        elif "```" in text:
            text = text.split("```")[1].split("```")[0]
        return text.strip()


def _as_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def parse_retry_after(header: Optional[str]) -> Optional[int]:
    if not header:
        return None
    try:
        return max(1, int(float(header)))
    except ValueError:
        return None


def content_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Copies only the resume fields out of a response object."""
    keys = ("summary", "skills", "experience", "education", "projects")
    return {k: data[k] for k in keys if k in data}
