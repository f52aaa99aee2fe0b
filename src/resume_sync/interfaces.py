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
Contracts for the collaborators the sync engine talks to.
"""

from typing import Any, Dict, Mapping, Optional, Protocol

from resume_sync.models import RenderHint, SaveResult


class EnhancementService(Protocol):
    async def enhance(self, payload: Any, kind: str) -> Mapping[str, Any]:
        """
        Returns partial resume fields as a JSON object.
        `payload` is the section text for "summary"/"skills" and the full
        snapshot dict for "resume".
        Raises ServiceResponseError or TransportError.
        """
        ...


class ImportService(Protocol):
    async def parse_document(self, data: bytes, filename: Optional[str] = None) -> Mapping[str, Any]:
        """Raises UnsupportedFormatError or ParseError."""
        ...


class PersistenceService(Protocol):
    async def save(self, text: str) -> SaveResult:
        ...

    async def delete(self) -> None:
        ...

    async def generate_template(self, template_id: str) -> str:
        ...


class ResumeScorer(Protocol):
    async def score_resume(self, text: str) -> Dict[str, Any]:
        ...


class DisplaySurface(Protocol):
    def show(self, text: str, hint: RenderHint) -> None:
        ...
