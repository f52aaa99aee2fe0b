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
One editing session: the document, its view, the rate limiter and the
orchestrator, plus the save/delete/template operations.
"""

import asyncio
import logging
import re
import time
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from resume_sync.config import Settings
from resume_sync.controller import ModeChange, ViewController
from resume_sync.document import DocumentModel
from resume_sync.errors import PersistenceError
from resume_sync.http_client import HttpEnhancementService
from resume_sync.ingest import DocumentImporter
from resume_sync.interfaces import DisplaySurface, EnhancementService, ImportService, PersistenceService
from resume_sync.llm_client import LLMClient
from resume_sync.models import DocumentState, Mode, SaveResult, SectionKind
from resume_sync.orchestrator import DEFAULT_SMOOTHING_DELAY, EnhancementOrchestrator
from resume_sync.ratelimit import DEFAULT_WINDOW_SECONDS, RateLimiter
from resume_sync.store import LocalResumeStore

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Collapses runs of blank lines and trims, as done before every save."""
    return re.sub(r"\n\s*\n", "\n\n", text).strip()


class ResumeSession:
    """
    Owns every piece of mutable state for one resume. Nothing is shared
    between sessions: each gets its own rate limiter.
    """

    def __init__(
        self,
        enhancer: EnhancementService,
        importer: Optional[ImportService] = None,
        persistence: Optional[PersistenceService] = None,
        state: Optional[DocumentState] = None,
        initial_text: str = "",
        display: Optional[DisplaySurface] = None,
        cooldown_seconds: float = DEFAULT_WINDOW_SECONDS,
        smoothing_delay: float = DEFAULT_SMOOTHING_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.model = DocumentModel(state)
        self.controller = ViewController(self.model, initial_text=initial_text, display=display)
        # Wall clock, so the cooldown survives a snapshot round trip
        self.limiter = RateLimiter(window=cooldown_seconds, clock=time.time)
        self.orchestrator = EnhancementOrchestrator(
            self.controller,
            self.limiter,
            enhancer,
            importer,
            smoothing_delay=smoothing_delay,
            sleep=sleep,
        )
        self.persistence = persistence
        self.ats_score: Optional[int] = None
        self.ats_feedback: Optional[Dict[str, Any]] = None

    @property
    def text(self) -> str:
        return self.controller.text

    @property
    def mode(self) -> Mode:
        return self.controller.mode

    @property
    def state(self) -> DocumentState:
        return self.model.state

    def set_field(self, path: str, value: Any) -> None:
        self.controller.set_field(path, value)

    def edit_text(self, text: str) -> None:
        self.controller.edit_text(text)

    def enter_freeform(self) -> ModeChange:
        return self.controller.enter_freeform()

    def enter_structured(self) -> ModeChange:
        return self.controller.enter_structured()

    async def improve_section(self, kind: SectionKind) -> str:
        return await self.orchestrator.improve_section(kind)

    async def enhance_whole_document(self) -> DocumentState:
        return await self.orchestrator.enhance_whole_document()

    async def import_from_file(self, data: bytes, filename: Optional[str] = None) -> DocumentState:
        return await self.orchestrator.import_from_file(data, filename)

    async def save(self) -> SaveResult:
        result = await self._persistence().save(normalize_text(self.controller.text))
        if result.ats_score is not None:
            self.ats_score = result.ats_score
            self.ats_feedback = result.feedback
        logger.info("Resume saved successfully!")
        return result

    async def delete(self) -> None:
        """Deletes the stored resume, then resets the session to an empty form."""
        await self._persistence().delete()
        self.model.replace(DocumentState())
        self.controller.reset()
        self.ats_score = None
        self.ats_feedback = None
        logger.info("Resume deleted successfully!")

    async def apply_template(self, template_id: str) -> str:
        text = await self._persistence().generate_template(template_id)
        self.controller.load_text(text)
        logger.info("Template generated successfully!")
        return text

    def to_snapshot(self) -> Dict[str, Any]:
        snapshot = {
            "state": self.model.state.to_dict(),
            "text": self.controller.text,
            "mode": self.controller.mode.value,
        }
        if self.ats_score is not None:
            snapshot["atsScore"] = self.ats_score
            snapshot["feedback"] = self.ats_feedback
        if self.limiter.last_success_at is not None:
            snapshot["lastEnhancementAt"] = self.limiter.last_success_at
        return snapshot

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any], **kwargs) -> "ResumeSession":
        """
        Restores a session saved with to_snapshot(). A freeform snapshot keeps
        its text; a structured one is re-projected from the state.
        """
        state = DocumentState.from_dict(snapshot.get("state"))
        text = snapshot.get("text") or ""
        session = cls(state=state, **kwargs)
        if snapshot.get("mode") == Mode.FREEFORM.value:
            session.controller.load_text(text)
        session.ats_score = snapshot.get("atsScore")
        session.ats_feedback = snapshot.get("feedback")
        session.limiter.last_success_at = snapshot.get("lastEnhancementAt")
        return session

    def _persistence(self) -> PersistenceService:
        if self.persistence is None:
            raise PersistenceError("No persistence service is configured")
        return self.persistence


def create_session(settings: Settings, snapshot: Optional[Mapping[str, Any]] = None, display: Optional[DisplaySurface] = None) -> ResumeSession:
    """Wires the default collaborators for `settings` into a session."""
    llm = LLMClient(settings)
    if settings.enhance_url:
        logger.info(f"Using enhancement endpoint: {settings.enhance_url}")
        enhancer = HttpEnhancementService(settings.enhance_url, settings)
    else:
        enhancer = llm

    store = LocalResumeStore(settings.storage_dir, scorer=llm)
    kwargs = dict(
        enhancer=enhancer,
        importer=DocumentImporter(llm),
        persistence=store,
        display=display,
        cooldown_seconds=settings.cooldown_seconds,
        smoothing_delay=settings.smoothing_delay,
    )
    if snapshot:
        return ResumeSession.from_snapshot(snapshot, **kwargs)
    # No snapshot yet: a previously saved resume opens as free text
    return ResumeSession(initial_text=store.load(), **kwargs)
