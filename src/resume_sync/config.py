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
Runtime settings, read from the environment.

CA bundle resolution for proxy environments checks (in priority order):
  1. Explicit override via the --ca-bundle CLI arg
  2. REQUESTS_CA_BUNDLE environment variable
  3. CURL_CA_BUNDLE environment variable
  4. SSL_CERT_FILE environment variable
  5. System defaults (True, i.e. certifi / OS trust store)
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)

CA_BUNDLE_VARS = ("REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE", "SSL_CERT_FILE")


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not a number. Using {default}.")
        return default


@dataclass
class Settings:
    """
    Everything a session needs to know about its environment.
    Build with Settings.from_env(); CLI flags may override fields afterwards.
    """
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    provider: str = "gemini"
    openai_model: str = "gpt-4o-mini"
    gemini_model: str = "gemini-1.5-flash"
    cooldown_seconds: float = 60.0
    smoothing_delay: float = 0.5
    request_timeout: float = 60.0
    enhance_url: Optional[str] = None
    storage_dir: str = "user_content"
    ca_bundle_override: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        openai_key = os.environ.get("OPENAI_API_KEY")
        gemini_key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
        default_provider = "openai" if openai_key and not gemini_key else "gemini"
        return cls(
            gemini_api_key=gemini_key,
            openai_api_key=openai_key,
            provider=os.environ.get("RESUME_SYNC_PROVIDER", default_provider).lower(),
            openai_model=os.environ.get("RESUME_SYNC_OPENAI_MODEL", cls.openai_model),
            gemini_model=os.environ.get("RESUME_SYNC_GEMINI_MODEL", cls.gemini_model),
            cooldown_seconds=_env_float("RESUME_SYNC_COOLDOWN_SECONDS", cls.cooldown_seconds),
            smoothing_delay=_env_float("RESUME_SYNC_SMOOTHING_DELAY", cls.smoothing_delay),
            request_timeout=_env_float("RESUME_SYNC_TIMEOUT", cls.request_timeout),
            enhance_url=os.environ.get("RESUME_SYNC_ENHANCE_URL") or None,
            storage_dir=os.environ.get("RESUME_SYNC_STORAGE_DIR", cls.storage_dir),
        )

    def get_ca_bundle(self) -> Union[str, bool]:
        """
        Resolve the CA bundle to use for outbound HTTPS requests.

        Returns:
            str: Path to a CA bundle file, or
            bool: True to use the default system/certifi trust store.
        """
        if self.ca_bundle_override:
            return self.ca_bundle_override

        for var in CA_BUNDLE_VARS:
            value = os.environ.get(var)
            if value:
                logger.debug(f"Using CA bundle from {var}: {value}")
                return value

        return True

    def configure_ssl_env(self) -> None:
        """
        Export SSL_CERT_FILE when a custom CA bundle is configured.
        The OpenAI and Google GenAI SDKs are httpx-based and read it directly.
        """
        bundle = self.get_ca_bundle()
        if isinstance(bundle, str) and os.environ.get("SSL_CERT_FILE") != bundle:
            os.environ["SSL_CERT_FILE"] = bundle
            logger.debug(f"Set SSL_CERT_FILE={bundle} for SDK clients")
