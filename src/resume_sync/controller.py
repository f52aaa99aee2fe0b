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
View Controller and Divergence Tracker.

The displayed text is owned by exactly one surface at a time:
  - STRUCTURED: the text is always the projection of the structured fields.
  - FREEFORM: the text belongs to the user; structured edits still update the
    model but never touch the text until the user switches back.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from resume_sync.document import DocumentModel
from resume_sync.errors import ModeError
from resume_sync.interfaces import DisplaySurface
from resume_sync.models import Mode, PartialUpdate, RenderHint, ViewFrame

logger = logging.getLogger(__name__)

DISCARD_WARNING = "You will lose edited markdown if you update the form data."


@dataclass
class ModeChange:
    """Outcome of a mode transition. `warning` is advisory only."""
    previous: Mode
    current: Mode
    warning: Optional[str] = None
    discarded_edits: bool = False


class DivergenceTracker:
    """
    Remembers the last projection and whether the text was edited by hand since.
    Structured edits made in FREEFORM move the projection but are not divergence.
    """

    def __init__(self):
        self.last_projection = ""
        self.edited = False

    def mark_synced(self, projection: str) -> None:
        self.last_projection = projection
        self.edited = False

    def mark_edited(self) -> None:
        self.edited = True

    def is_diverged(self, displayed: str) -> bool:
        return self.edited and displayed != self.last_projection


class ViewController:
    """
    Mediates every write to the displayed text.
    """

    def __init__(self, model: DocumentModel, initial_text: str = "", display: Optional[DisplaySurface] = None):
        self.model = model
        self.display = display
        self.tracker = DivergenceTracker()

        # Seeded with text but no structured data: the text is all we have.
        if initial_text and model.is_empty():
            self.mode = Mode.FREEFORM
            self.hint = RenderHint.PREVIEW
            self._text = initial_text
            self.tracker.mark_edited()
            logger.debug("Starting in freeform mode with seeded text")
        else:
            self.mode = Mode.STRUCTURED
            self.hint = RenderHint.PREVIEW
            self._text = ""
            self._reproject()

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_diverged(self) -> bool:
        return self.tracker.is_diverged(self._text)

    def frame(self) -> ViewFrame:
        return ViewFrame(text=self._text, mode=self.mode, hint=self.hint, diverged=self.is_diverged)

    def set_field(self, path: str, value: Any) -> None:
        self.model.set_field(path, value)
        if self.mode == Mode.STRUCTURED:
            self._reproject()

    def apply_update(self, update: PartialUpdate) -> List[str]:
        written = self.model.apply_update(update)
        if written and self.mode == Mode.STRUCTURED:
            self._reproject()
        return written

    def edit_text(self, text: str) -> None:
        if self.mode != Mode.FREEFORM:
            raise ModeError("The document is generated from the form. Switch to freeform editing first.")
        self.tracker.mark_edited()
        self._set_text(text)

    def load_text(self, text: str) -> None:
        """Replaces the displayed text with collaborator-supplied text (e.g. a template)."""
        if self.mode == Mode.STRUCTURED:
            self.enter_freeform()
        self.tracker.mark_edited()
        self._set_text(text)

    def reset(self) -> None:
        """Clears the displayed text after the resume has been deleted."""
        self.mode = Mode.STRUCTURED
        self.hint = RenderHint.PREVIEW
        self._reproject()

    def set_render_hint(self, hint: RenderHint) -> None:
        self.hint = hint
        self._push()

    def enter_freeform(self) -> ModeChange:
        previous = self.mode
        if previous == Mode.STRUCTURED:
            self.mode = Mode.FREEFORM
            self.hint = RenderHint.EDIT
            logger.info("Switched to freeform editing")
            self._push()
        return ModeChange(previous=previous, current=self.mode)

    def enter_structured(self) -> ModeChange:
        """
        Re-synchronizes the text from the structured fields.
        Unsynchronized free-text edits are discarded; we warn but never block.
        """
        previous = self.mode
        if previous == Mode.STRUCTURED:
            return ModeChange(previous=previous, current=self.mode)

        warning = None
        diverged = self.is_diverged
        if diverged:
            warning = DISCARD_WARNING
            logger.warning(f"Discarding freeform edits: {DISCARD_WARNING}")

        self.mode = Mode.STRUCTURED
        self.hint = RenderHint.PREVIEW
        self._reproject()
        return ModeChange(previous=previous, current=self.mode, warning=warning, discarded_edits=diverged)

    def _reproject(self) -> None:
        projection = self.model.project()
        self.tracker.mark_synced(projection)
        self._set_text(projection)

    def _set_text(self, text: str) -> None:
        self._text = text
        self._push()

    def _push(self) -> None:
        if self.display is not None:
            self.display.show(self._text, self.hint)
