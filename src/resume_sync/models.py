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
Data models for the resume sync engine.
"""

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from resume_sync.errors import ValidationError

ENTRY_SECTIONS = ("experience", "education", "projects")
CONTACT_FIELDS = ("name", "email", "mobile", "linkedin", "twitter")


class Mode(str, Enum):
    """Which surface currently owns the displayed text."""
    STRUCTURED = "structured"
    FREEFORM = "freeform"


class RenderHint(str, Enum):
    """Opaque hint for the display surface."""
    PREVIEW = "preview"
    EDIT = "edit"
    SPLIT = "split"


class SectionKind(str, Enum):
    """Single-field sections that can be improved on their own."""
    SUMMARY = "summary"
    SKILLS = "skills"


@dataclass
class ContactInfo:
    """Contact details. Every field is optional and independent."""
    name: Optional[str] = None
    email: Optional[str] = None
    mobile: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(getattr(self, f) for f in CONTACT_FIELDS)

    def to_dict(self) -> Dict[str, str]:
        return {f: getattr(self, f) for f in CONTACT_FIELDS if getattr(self, f) is not None}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ContactInfo":
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            raise ValidationError("contactInfo", "expected an object")
        values = {}
        for name in CONTACT_FIELDS:
            value = data.get(name)
            values[name] = None if value is None else str(value)
        return cls(**values)


def _as_flag(value: Any) -> bool:
    """Collaborators sometimes send "true"/"false" strings."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


@dataclass
class Entry:
    """
    A single experience, education or project entry.
    `subtitle` is the organisation (company, school, ...).
    """
    title: str
    subtitle: str = ""
    start_date: str = ""
    end_date: str = ""
    is_current: bool = False
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "organization": self.subtitle,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "current": self.is_current,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str = "entry") -> "Entry":
        """Accepts both the camelCase wire shape and our own field names."""
        if not isinstance(data, Mapping):
            raise ValidationError(path, "expected an object")

        def text(*keys: str) -> str:
            for key in keys:
                value = data.get(key)
                if value is not None:
                    return str(value)
            return ""

        current = data.get("current", data.get("isCurrent", data.get("is_current", False)))
        return cls(
            title=text("title"),
            subtitle=text("organization", "subtitle"),
            start_date=text("startDate", "start_date"),
            end_date=text("endDate", "end_date"),
            is_current=_as_flag(current),
            description=text("description"),
        )


@dataclass
class DocumentState:
    """
    The single source of structured truth for one resume.
    Only the DocumentModel mutates it.
    """
    contact_info: ContactInfo = field(default_factory=ContactInfo)
    summary: str = ""
    skills: str = ""
    experience: List[Entry] = field(default_factory=list)
    education: List[Entry] = field(default_factory=list)
    projects: List[Entry] = field(default_factory=list)

    def copy(self) -> "DocumentState":
        return copy.deepcopy(self)

    def is_empty(self) -> bool:
        return (
            self.contact_info.is_empty()
            and not self.summary
            and not self.skills
            and not any(getattr(self, s) for s in ENTRY_SECTIONS)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contactInfo": self.contact_info.to_dict(),
            "summary": self.summary,
            "skills": self.skills,
            "experience": [e.to_dict() for e in self.experience],
            "education": [e.to_dict() for e in self.education],
            "projects": [e.to_dict() for e in self.projects],
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DocumentState":
        if not data:
            return cls()
        state = cls(
            contact_info=ContactInfo.from_dict(data.get("contactInfo")),
            summary=str(data.get("summary") or ""),
            skills=str(data.get("skills") or ""),
        )
        for section in ENTRY_SECTIONS:
            items = data.get(section) or []
            setattr(state, section, [Entry.from_dict(item, f"{section}[{i}]") for i, item in enumerate(items)])
        return state


@dataclass
class PartialUpdate:
    """
    Fields returned by an enhancement or import collaborator.

    A field left as None was not returned and must not be touched. Any other
    value, including "" or [], was returned and overwrites.
    """
    summary: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[List[Entry]] = None
    education: Optional[List[Entry]] = None
    projects: Optional[List[Entry]] = None

    def present_fields(self) -> List[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        return not self.present_fields()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PartialUpdate":
        """
        Builds an update from a collaborator's JSON object.
        Raises ValidationError when a present field has the wrong shape.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError("response", "expected a JSON object")

        update = cls()
        for name in ("summary", "skills"):
            value = payload.get(name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise ValidationError(name, "expected text")
            setattr(update, name, value)

        for section in ENTRY_SECTIONS:
            items = payload.get(section)
            if items is None:
                continue
            if not isinstance(items, list):
                raise ValidationError(section, "expected a list of entries")
            setattr(update, section, [Entry.from_dict(item, f"{section}[{i}]") for i, item in enumerate(items)])
        return update


@dataclass
class SaveResult:
    """What the persistence collaborator reports back after a save."""
    saved_text: str
    ats_score: Optional[int] = None
    feedback: Optional[Dict[str, List[str]]] = None


@dataclass
class ViewFrame:
    """What the display surface should currently show."""
    text: str
    mode: Mode
    hint: RenderHint
    diverged: bool = False
