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
Single-slot cooldown gate shared by every enhancement request.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 60.0


@dataclass(frozen=True)
class Acquired:
    """The slot is ours. Call record_success() or release() when done."""


@dataclass(frozen=True)
class Busy:
    remaining_seconds: int


class RateLimiter:
    """
    One clock for every enhancement kind.

    The window only starts when a request succeeds, so a failed call leaves
    the user free to retry straight away. While a request holds the slot,
    everyone else is told to wait a full window.
    """

    def __init__(self, window: float = DEFAULT_WINDOW_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.window = window
        self.clock = clock
        self.last_success_at: Optional[float] = None
        self.held = False

    def try_acquire(self, now: Optional[float] = None) -> Union[Acquired, Busy]:
        now = self.clock() if now is None else now

        if self.held:
            return Busy(math.ceil(self.window))

        if self.last_success_at is not None:
            elapsed = now - self.last_success_at
            if elapsed < self.window:
                remaining = max(1, math.ceil(self.window - elapsed))
                logger.debug(f"Rate limiter busy for another {remaining}s")
                return Busy(remaining)

        self.held = True
        return Acquired()

    def record_success(self, now: Optional[float] = None) -> None:
        self.last_success_at = self.clock() if now is None else now
        self.held = False

    def release(self) -> None:
        self.held = False
