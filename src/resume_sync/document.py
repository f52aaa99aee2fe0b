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
The Document Model: owns the structured resume and its field-level setters.
"""

import copy
import logging
import re
from typing import Any, List, Mapping, Optional

from resume_sync.errors import ValidationError
from resume_sync.models import (
    CONTACT_FIELDS,
    ENTRY_SECTIONS,
    DocumentState,
    Entry,
    PartialUpdate,
)
from resume_sync.projection import project

logger = logging.getLogger(__name__)

# Syntax only; we never check that the mailbox exists.
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class DocumentModel:
    """
    Holds the DocumentState for a session.
    Inputs are copied on the way in and the state is copied on the way out,
    so nothing outside this class can mutate it.
    """

    def __init__(self, state: Optional[DocumentState] = None):
        self._state = state.copy() if state else DocumentState()

    @property
    def state(self) -> DocumentState:
        return self._state.copy()

    def get_field(self, path: str) -> Any:
        if path.startswith("contactInfo."):
            return getattr(self._state.contact_info, self._contact_field(path))
        if path in ("summary", "skills"):
            return getattr(self._state, path)
        if path in ENTRY_SECTIONS:
            return copy.deepcopy(getattr(self._state, path))
        raise ValidationError(path, "unknown field")

    def set_field(self, path: str, value: Any) -> None:
        """
        Sets one scalar field or replaces one entry list wholesale.
        Raises ValidationError and leaves the state untouched if the value is malformed.
        """
        if path.startswith("contactInfo."):
            name = self._contact_field(path)
            setattr(self._state.contact_info, name, self._validate_contact(path, name, value))
        elif path in ("summary", "skills"):
            if not isinstance(value, str):
                raise ValidationError(path, "expected text")
            setattr(self._state, path, value)
        elif path in ENTRY_SECTIONS:
            setattr(self._state, path, self._validate_entries(path, value))
        else:
            raise ValidationError(path, "unknown field")
        logger.debug(f"Set field {path}")

    def apply_update(self, update: PartialUpdate) -> List[str]:
        """
        Overwrites the fields present in `update`, leaving absent ones alone.
        Every present field is validated before any is written.
        Returns the names of the fields that were written.
        """
        staged = {}
        for name in update.present_fields():
            value = getattr(update, name)
            if name in ENTRY_SECTIONS:
                value = self._validate_entries(name, value)
            staged[name] = value

        for name, value in staged.items():
            setattr(self._state, name, value)
        if staged:
            logger.debug(f"Applied update to: {', '.join(staged)}")
        return list(staged)

    def replace(self, state: DocumentState) -> None:
        self._state = state.copy()

    def project(self) -> str:
        return project(self._state)

    def has_enhanceable_content(self) -> bool:
        return bool(self._state.summary.strip() or self._state.skills.strip() or self._state.experience)

    def is_empty(self) -> bool:
        return self._state.is_empty()

    @staticmethod
    def _contact_field(path: str) -> str:
        name = path.split(".", 1)[1]
        if name not in CONTACT_FIELDS:
            raise ValidationError(path, "unknown contact field")
        return name

    @staticmethod
    def _validate_contact(path: str, name: str, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(path, "expected text")
        if name == "email" and value and not EMAIL_RE.match(value):
            raise ValidationError(path, "invalid email address")
        return value

    @staticmethod
    def _validate_entries(path: str, value: Any) -> List[Entry]:
        if not isinstance(value, (list, tuple)):
            raise ValidationError(path, "expected a list of entries")

        entries = []
        for i, item in enumerate(value):
            if isinstance(item, Entry):
                entry = copy.copy(item)
            elif isinstance(item, Mapping):
                entry = Entry.from_dict(item, f"{path}[{i}]")
            else:
                raise ValidationError(f"{path}[{i}]", "expected an entry")
            if not entry.title.strip():
                raise ValidationError(f"{path}[{i}].title", "title is required")
            entries.append(entry)
        return entries
