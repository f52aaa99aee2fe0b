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

import unittest
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
from google.genai import errors as genai_errors

from resume_sync import llm_client
from resume_sync.config import Settings
from resume_sync.errors import ServiceResponseError, TransportError

OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


class TestLLMProviders(unittest.IsolatedAsyncioTestCase):

    async def test_call_llm_gemini(self):
        mock_client = MagicMock()
        mock_response = MagicMock()
        mock_response.text = "Gemini Response"
        mock_client.aio.models.generate_content = AsyncMock(return_value=mock_response)

        with patch("resume_sync.llm_client.genai.Client", return_value=mock_client):
            client = llm_client.LLMClient(Settings(gemini_api_key="mock_key", provider="gemini"))
            result = await client._call_llm("Test Prompt")

        self.assertEqual(result, "Gemini Response")
        kwargs = mock_client.aio.models.generate_content.call_args.kwargs
        self.assertEqual(kwargs["model"], "gemini-1.5-flash")
        self.assertEqual(kwargs["contents"], "Test Prompt")

    async def test_gemini_falls_back_when_model_missing(self):
        not_found = genai_errors.ClientError(404, {"error": {"code": 404, "message": "not found", "status": "NOT_FOUND"}})
        mock_response = MagicMock()
        mock_response.text = "Fallback Response"
        mock_client = MagicMock()
        mock_client.aio.models.generate_content = AsyncMock(side_effect=[not_found, mock_response])

        with patch("resume_sync.llm_client.genai.Client", return_value=mock_client):
            client = llm_client.LLMClient(Settings(gemini_api_key="mock_key", gemini_model="gemini-next"))
            result = await client._call_llm("Test Prompt")

        self.assertEqual(result, "Fallback Response")
        self.assertEqual(mock_client.aio.models.generate_content.await_count, 2)

    async def test_call_llm_openai(self):
        mock_message = MagicMock()
        mock_message.content = "OpenAI Response"
        mock_choice = MagicMock()
        mock_choice.message = mock_message
        mock_response = MagicMock()
        mock_response.choices = [mock_choice]
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)
        mock_client.__aenter__.return_value = mock_client
        mock_client.__aexit__.return_value = False

        with patch("resume_sync.llm_client.openai.AsyncOpenAI", return_value=mock_client):
            client = llm_client.LLMClient(Settings(openai_api_key="sk-mock", provider="openai"))
            result = await client._call_llm("Test Prompt")

        self.assertEqual(result, "OpenAI Response")
        mock_client.__aexit__.assert_awaited_once()

    async def test_missing_api_key_is_service_error(self):
        client = llm_client.LLMClient(Settings(provider="gemini"))
        with self.assertRaises(ServiceResponseError) as ctx:
            await client._call_llm("Test Prompt")
        self.assertEqual(ctx.exception.status, 401)

    async def test_openai_rate_limit_keeps_status_and_retry_after(self):
        response = httpx.Response(429, headers={"retry-after": "12"}, request=OPENAI_REQUEST)
        error = openai.RateLimitError("Too Many Requests", response=response, body=None)
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(side_effect=error)
        mock_client.__aenter__.return_value = mock_client
        mock_client.__aexit__.return_value = False

        with patch("resume_sync.llm_client.openai.AsyncOpenAI", return_value=mock_client):
            client = llm_client.LLMClient(Settings(openai_api_key="sk-mock", provider="openai"))
            with self.assertRaises(ServiceResponseError) as ctx:
                await client._call_llm("Test Prompt")

        self.assertEqual(ctx.exception.status, 429)
        self.assertEqual(ctx.exception.retry_after, 12)

    async def test_openai_timeout_is_transport_error(self):
        mock_client = MagicMock()
        mock_client.chat.completions.create = AsyncMock(side_effect=openai.APITimeoutError(request=OPENAI_REQUEST))
        mock_client.__aenter__.return_value = mock_client
        mock_client.__aexit__.return_value = False

        with patch("resume_sync.llm_client.openai.AsyncOpenAI", return_value=mock_client):
            client = llm_client.LLMClient(Settings(openai_api_key="sk-mock", provider="openai"))
            with self.assertRaises(TransportError):
                await client._call_llm("Test Prompt")


class TestLLMPrompts(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.client = llm_client.LLMClient(Settings(gemini_api_key="mock_key"))

    async def test_enhance_section_returns_field(self):
        with patch.object(self.client, "_call_llm", AsyncMock(return_value="  Sharper summary.\n")) as call:
            result = await self.client.enhance("My summary", "summary")
        self.assertEqual(result, {"summary": "Sharper summary."})
        self.assertIn("My summary", call.call_args[0][0])
        self.assertIn("professional summary", call.call_args[0][0])

    async def test_enhance_resume_strips_fences_and_unknown_keys(self):
        fake_json = """```json
        {"summary": "New", "skills": "Go", "name": "ignored", "education": []}
        ```"""
        with patch.object(self.client, "_call_llm", AsyncMock(return_value=fake_json)) as call:
            result = await self.client.enhance({"summary": "Old"}, "resume")
        self.assertEqual(result, {"summary": "New", "skills": "Go", "education": []})
        self.assertIn('"summary": "Old"', call.call_args[0][0])

    async def test_content_wrapper_is_unwrapped(self):
        fake_json = '{"content": {"skills": "Rust"}}'
        with patch.object(self.client, "_call_llm", AsyncMock(return_value=fake_json)):
            result = await self.client.extract_sections("resume text")
        self.assertEqual(result, {"skills": "Rust"})

    async def test_invalid_json_is_service_error(self):
        with patch.object(self.client, "_call_llm", AsyncMock(return_value="Sorry, I can't")):
            with self.assertRaises(ServiceResponseError) as ctx:
                await self.client.enhance({"summary": "Old"}, "resume")
        self.assertEqual(ctx.exception.status, 502)

    async def test_score_resume(self):
        fake_json = '{"atsScore": "82", "feedback": {"strengths": "Clear layout", "improvements": ["Add metrics"]}}'
        with patch.object(self.client, "_call_llm", AsyncMock(return_value=fake_json)):
            result = await self.client.score_resume("## Skills\n\nPython")
        self.assertEqual(result["atsScore"], 82)
        self.assertEqual(result["feedback"]["strengths"], ["Clear layout"])
        self.assertEqual(result["feedback"]["improvements"], ["Add metrics"])


if __name__ == '__main__':
    unittest.main()
