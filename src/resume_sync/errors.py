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
Exception hierarchy for the resume sync engine.

Operations return their value on success and raise one of these on failure.
Nothing here is fatal to a session; callers decide how to present them.
"""

from enum import Enum
from typing import Optional


class ResumeSyncError(Exception):
    """Base class for every error raised by resume_sync."""


class ValidationError(ResumeSyncError):
    """A field value failed its shape checks. The document is unchanged."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class EmptyInputError(ResumeSyncError):
    """An enhancement was requested for content that is empty."""


class ModeError(ResumeSyncError):
    """A write was attempted that the current view mode does not allow."""


class OperationInProgressError(ResumeSyncError):
    """A request of the same kind is already in flight."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"'{operation}' is already in progress. Wait for it to finish.")


class EnhancementReason(str, Enum):
    RATE_LIMITED = "rate_limited"
    SERVICE_ERROR = "service_error"
    NETWORK_ERROR = "network_error"


class EnhancementError(ResumeSyncError):
    """
    An enhancement request failed.

    Attributes:
        reason: Which failure class this is (see EnhancementReason)
        retry_after: Whole seconds to wait before retrying, when known
    """

    def __init__(self, reason: EnhancementReason, message: str = "", retry_after: Optional[int] = None):
        self.reason = reason
        self.retry_after = retry_after
        if not message:
            if reason == EnhancementReason.RATE_LIMITED and retry_after:
                message = f"Please wait {retry_after} seconds before trying again."
            else:
                message = reason.value.replace("_", " ")
        self.message = message
        super().__init__(message)


class DocumentImportError(ResumeSyncError):
    """Base class for failures while importing an uploaded resume."""


class UnsupportedFormatError(DocumentImportError):
    """The uploaded file is not in a format we can read."""


class ParseError(DocumentImportError):
    """The uploaded file could not be turned into resume fields."""


class PersistenceError(ResumeSyncError):
    """Opaque failure reported by the persistence collaborator."""


class ServiceResponseError(ResumeSyncError):
    """
    Raised by enhancement collaborators when the service answers with an error.

    The orchestrator maps status 429 to a rate-limit failure and everything
    else to a service failure.
    """

    def __init__(self, status: int, body: str = "", retry_after: Optional[int] = None):
        self.status = status
        self.body = body
        self.retry_after = retry_after
        super().__init__(f"Service returned {status}: {body[:200]}")


class TransportError(ResumeSyncError):
    """Raised by collaborators when the request never got a response (timeouts included)."""
