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
Local persistence collaborator: keeps the resume Markdown on disk and
optionally scores it for ATS compatibility on every save.
"""

import logging
from pathlib import Path
from typing import Optional

from resume_sync.errors import PersistenceError, ResumeSyncError
from resume_sync.interfaces import ResumeScorer
from resume_sync.models import SaveResult

logger = logging.getLogger(__name__)

RESUME_FILENAME = "resume.md"

TEMPLATES = {
    "modern": """## Contact Information

**Your Name** | 📧 you@example.com | 📱 +1 555 0100 | 💼 [LinkedIn](https://linkedin.com/in/you)

## Professional Summary

Results-driven professional with a track record of shipping impactful work.

## Skills

Languages, frameworks, tools.

## Work Experience

### Job Title @ Company
Jan 2022 - Present

- Led an initiative that improved a key metric by X%.""",
    "professional": """## Contact Information

**Your Name** | 📧 you@example.com | 📱 +1 555 0100

## Professional Summary

Experienced professional with deep expertise in your field.

## Work Experience

### Job Title @ Company
Jan 2018 - Dec 2022

Responsibilities and measurable achievements.

## Education

### Degree @ University
2014 - 2018""",
    "minimal": """## Contact Information

**Your Name** | 📧 you@example.com

## Skills

Skill one, skill two, skill three.

## Work Experience

### Job Title @ Company
2020 - Present""",
    "creative": """## Contact Information

**Your Name** | 📧 you@example.com | 🐦 [Twitter](https://twitter.com/you)

## Professional Summary

A one-line story of what you build and why it matters.

## Projects

### Project Name @ Personal
2023 - Present

What it does, who uses it, and what you learned.

## Skills

Design, prototyping, storytelling.""",
}


class LocalResumeStore:
    """Saves the resume as Markdown in `directory`."""

    def __init__(self, directory: str, scorer: Optional[ResumeScorer] = None):
        self.directory = Path(directory)
        self.scorer = scorer

    @property
    def path(self) -> Path:
        return self.directory / RESUME_FILENAME

    def load(self) -> str:
        if not self.path.exists():
            return ""
        return self.path.read_text(encoding="utf-8")

    async def save(self, text: str) -> SaveResult:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to save resume: {e}") from e
        logger.info(f"Resume saved to {self.path}")

        result = SaveResult(saved_text=text)
        if self.scorer is not None and text.strip():
            try:
                scored = await self.scorer.score_resume(text)
            except ResumeSyncError as e:
                logger.warning(f"Resume saved, but ATS scoring failed: {e}")
                return result
            result.ats_score = scored.get("atsScore")
            result.feedback = scored.get("feedback")
        return result

    async def delete(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete resume: {e}") from e
        logger.info(f"Resume deleted from {self.path}")

    async def generate_template(self, template_id: str) -> str:
        template = TEMPLATES.get(template_id)
        if template is None:
            raise PersistenceError(f"Unknown template '{template_id}'. Choose one of: {', '.join(TEMPLATES)}")
        return template
