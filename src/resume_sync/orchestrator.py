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
Enhancement Orchestrator.

Issues enhancement and import requests, applies their results to the
document, and reports what happened. All work runs on one event loop; the
only suspension points are the collaborator calls and the smoothing delay.

While a request is suspended the document stays editable. Results are written
through the setters without version checks, so the last write wins.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Awaitable, Callable, Mapping, Optional, Set, Union

from resume_sync.controller import ViewController
from resume_sync.errors import (
    EmptyInputError,
    EnhancementError,
    EnhancementReason,
    OperationInProgressError,
    ParseError,
    ServiceResponseError,
    TransportError,
    UnsupportedFormatError,
    ValidationError,
)
from resume_sync.interfaces import EnhancementService, ImportService
from resume_sync.models import DocumentState, PartialUpdate, SectionKind
from resume_sync.ratelimit import Busy, RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_SMOOTHING_DELAY = 0.5
WHOLE_DOCUMENT_KIND = "resume"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a minute before trying again."


class EnhancementOrchestrator:
    """
    Runs improve/enhance/import operations against a ViewController.

    Each operation kind may have one request in flight; the rate limiter
    additionally serializes the network calls of improve and enhance.
    """

    def __init__(
        self,
        controller: ViewController,
        limiter: RateLimiter,
        enhancer: EnhancementService,
        importer: Optional[ImportService] = None,
        smoothing_delay: float = DEFAULT_SMOOTHING_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.controller = controller
        self.limiter = limiter
        self.enhancer = enhancer
        self.importer = importer
        self.smoothing_delay = smoothing_delay
        self._sleep = sleep
        self._in_flight: Set[str] = set()

    async def improve_section(self, kind: Union[SectionKind, str]) -> str:
        """
        Sends one section to the enhancement service and writes the result back.
        Returns the improved text.
        """
        kind = SectionKind(kind)
        with self._guard(f"improve_{kind.value}"):
            current = self.controller.model.get_field(kind.value)
            if not current.strip():
                raise EmptyInputError(f"Please enter {kind.value} first")

            logger.info(f"Improving your {kind.value}... This may take a moment.")
            async with self._rate_limited():
                response = await self._call_enhancer(current, kind.value)

                improved = response.get(kind.value)
                if not isinstance(improved, str) or not improved.strip():
                    raise EnhancementError(EnhancementReason.SERVICE_ERROR, f"Service returned no {kind.value}")
                self.controller.set_field(kind.value, improved)

            logger.info(f"{kind.value.capitalize()} improved successfully!")
            return improved

    async def enhance_whole_document(self) -> DocumentState:
        """
        Sends the full structured snapshot and overwrites whichever fields
        come back. Fields missing from the response are left alone.
        """
        with self._guard("enhance"):
            if not self.controller.model.has_enhanceable_content():
                raise EmptyInputError("Please add some content to your resume first")

            logger.info("Enhancing your resume... This may take a minute or two due to rate limits.")
            async with self._rate_limited():
                snapshot = self.controller.model.state.to_dict()
                response = await self._call_enhancer(snapshot, WHOLE_DOCUMENT_KIND)

                try:
                    written = self.controller.apply_update(PartialUpdate.from_payload(response))
                except ValidationError as e:
                    raise EnhancementError(EnhancementReason.SERVICE_ERROR, f"Malformed enhancement response: {e}") from e

            logger.info(f"Resume enhanced successfully! Updated: {', '.join(written) or 'nothing'}")
            return self.controller.model.state

    async def import_from_file(self, data: bytes, filename: Optional[str] = None) -> DocumentState:
        """
        Parses an uploaded resume and applies the extracted fields.
        Not rate limited; the import service is a separate collaborator.
        """
        if self.importer is None:
            raise UnsupportedFormatError("No import service is configured")

        with self._guard("import"):
            logger.info(f"Importing resume{f' from {filename}' if filename else ''}")
            try:
                response = await self.importer.parse_document(data, filename)
            except (ServiceResponseError, TransportError) as e:
                raise ParseError(f"Failed to read resume: {e}") from e

            try:
                written = self.controller.apply_update(PartialUpdate.from_payload(response))
            except ValidationError as e:
                raise ParseError(f"Extracted content is malformed: {e}") from e

            logger.info(f"Resume uploaded successfully! Updated: {', '.join(written) or 'nothing'}")
            return self.controller.model.state

    @contextmanager
    def _guard(self, operation: str):
        if operation in self._in_flight:
            raise OperationInProgressError(operation)
        self._in_flight.add(operation)
        try:
            yield
        finally:
            self._in_flight.discard(operation)

    @asynccontextmanager
    async def _rate_limited(self):
        """
        Holds the limiter slot for the body. The cooldown window starts only
        if the body completes; any failure hands the slot back untouched.
        """
        decision = self.limiter.try_acquire()
        if isinstance(decision, Busy):
            raise EnhancementError(EnhancementReason.RATE_LIMITED, retry_after=decision.remaining_seconds)

        succeeded = False
        try:
            await self._sleep(self.smoothing_delay)
            yield
            succeeded = True
        finally:
            if succeeded:
                self.limiter.record_success()
            else:
                self.limiter.release()

    async def _call_enhancer(self, payload: Any, kind: str) -> Mapping[str, Any]:
        try:
            response = await self.enhancer.enhance(payload, kind)
        except ServiceResponseError as e:
            if e.status == 429:
                logger.warning(f"Enhancement service rate limited the {kind} request")
                raise EnhancementError(EnhancementReason.RATE_LIMITED, RATE_LIMIT_MESSAGE, e.retry_after) from e
            logger.error(f"Enhancement service error: {e}")
            raise EnhancementError(EnhancementReason.SERVICE_ERROR, e.body or str(e)) from e
        except (TransportError, asyncio.TimeoutError) as e:
            logger.error(f"Enhancement request failed: {e}")
            raise EnhancementError(EnhancementReason.NETWORK_ERROR, str(e) or "Request timed out") from e

        if not isinstance(response, Mapping):
            raise EnhancementError(EnhancementReason.SERVICE_ERROR, "Service returned an unexpected response")
        return response
