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
Enhancement collaborator backed by a remote `/api/resume/enhance` endpoint.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from resume_sync.config import Settings
from resume_sync.errors import ServiceResponseError, TransportError
from resume_sync.llm_client import content_fields, parse_retry_after

logger = logging.getLogger(__name__)

ENHANCE_PATH = "/api/resume/enhance"


class HttpEnhancementService:
    """
    Posts sections or whole snapshots to the enhancement endpoint.

    Section requests send {"content": text, "type": kind} and get back
    {"content": "improved text"}. Whole-resume requests send the snapshot and
    get back {"content": {partial resume fields}}.
    """

    def __init__(self, base_url: str, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or Settings.from_env()
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs = {"timeout": self.settings.request_timeout}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        else:
            kwargs["verify"] = self.settings.get_ca_bundle()
        return httpx.AsyncClient(base_url=self.base_url, **kwargs)

    async def enhance(self, payload: Any, kind: str) -> Dict[str, Any]:
        if kind == "resume":
            body = payload
        else:
            body = {"content": payload, "type": kind}

        try:
            async with self._client() as client:
                logger.debug(f"POST {self.base_url}{ENHANCE_PATH} ({kind})")
                response = await client.post(ENHANCE_PATH, json=body)
        except httpx.TransportError as e:
            # Timeouts are transport errors too
            raise TransportError(f"Enhancement request failed: {e}") from e

        if response.status_code != 200:
            raise ServiceResponseError(
                response.status_code,
                response.text or "Failed to improve content",
                parse_retry_after(response.headers.get("retry-after")),
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ServiceResponseError(502, "Enhancement service returned invalid JSON") from e

        content = data.get("content") if isinstance(data, dict) else None
        if kind == "resume":
            if not isinstance(content, dict):
                raise ServiceResponseError(502, "Enhancement response has no content")
            return content_fields(content)
        return {kind: content} if content is not None else {}
