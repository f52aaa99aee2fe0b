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

import asyncio
import os
import shutil
import tempfile
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from resume_sync.config import Settings
from resume_sync.errors import PersistenceError
from resume_sync.http_client import HttpEnhancementService
from resume_sync.llm_client import LLMClient
from resume_sync.models import DocumentState, Mode, SaveResult
from resume_sync.session import ResumeSession, create_session, normalize_text
from resume_sync.store import LocalResumeStore


def make_session(**kwargs) -> ResumeSession:
    enhancer = MagicMock()
    enhancer.enhance = AsyncMock(return_value={"summary": "Improved"})
    return ResumeSession(enhancer=enhancer, sleep=AsyncMock(), **kwargs)


class TestSessionPersistence(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.persistence = MagicMock()
        self.persistence.save = AsyncMock(return_value=SaveResult(saved_text="", ats_score=82, feedback={"strengths": ["a"], "improvements": []}))
        self.persistence.delete = AsyncMock()
        self.persistence.generate_template = AsyncMock(return_value="## Template")
        self.session = make_session(persistence=self.persistence, state=DocumentState(summary="Hello"))

    async def test_save_normalizes_text_and_keeps_score(self):
        self.session.enter_freeform()
        self.session.edit_text("\n\n## Skills\n\n\n  \nPython\n\n")
        result = await self.session.save()

        self.persistence.save.assert_awaited_once_with("## Skills\n\nPython")
        self.assertEqual(result.ats_score, 82)
        self.assertEqual(self.session.ats_score, 82)
        self.assertEqual(self.session.ats_feedback["strengths"], ["a"])

    async def test_save_failure_propagates(self):
        self.persistence.save = AsyncMock(side_effect=PersistenceError("disk full"))
        with self.assertRaises(PersistenceError):
            await self.session.save()

    async def test_delete_resets_everything(self):
        self.session.ats_score = 50
        self.session.enter_freeform()
        self.session.edit_text("X")

        await self.session.delete()

        self.assertEqual(self.session.state, DocumentState())
        self.assertEqual(self.session.text, "")
        self.assertEqual(self.session.mode, Mode.STRUCTURED)
        self.assertIsNone(self.session.ats_score)

    async def test_failed_delete_keeps_document(self):
        self.persistence.delete = AsyncMock(side_effect=PersistenceError("offline"))
        with self.assertRaises(PersistenceError):
            await self.session.delete()
        self.assertEqual(self.session.state.summary, "Hello")

    async def test_template_loads_into_freeform(self):
        await self.session.apply_template("modern")
        self.persistence.generate_template.assert_awaited_once_with("modern")
        self.assertEqual(self.session.mode, Mode.FREEFORM)
        self.assertEqual(self.session.text, "## Template")
        self.assertEqual(self.session.state.summary, "Hello")

    async def test_missing_persistence(self):
        with self.assertRaises(PersistenceError):
            await make_session().save()


class TestSessionSnapshot(unittest.IsolatedAsyncioTestCase):

    async def test_cooldown_survives_snapshot(self):
        session = make_session(state=DocumentState(summary="Hello"))
        await session.improve_section("summary")
        snapshot = session.to_snapshot()
        self.assertIn("lastEnhancementAt", snapshot)

        enhancer = MagicMock()
        enhancer.enhance = AsyncMock()
        restored = ResumeSession.from_snapshot(snapshot, enhancer=enhancer, sleep=AsyncMock())
        self.assertEqual(restored.state.summary, "Improved")
        self.assertEqual(restored.limiter.last_success_at, session.limiter.last_success_at)

    def test_freeform_snapshot_keeps_text(self):
        session = make_session(state=DocumentState(summary="Hello"))
        session.enter_freeform()
        session.edit_text("Hand edited")

        restored = ResumeSession.from_snapshot(session.to_snapshot(), enhancer=MagicMock())
        self.assertEqual(restored.mode, Mode.FREEFORM)
        self.assertEqual(restored.text, "Hand edited")

    def test_structured_snapshot_is_reprojected(self):
        session = make_session(state=DocumentState(skills="Go"))
        restored = ResumeSession.from_snapshot(session.to_snapshot(), enhancer=MagicMock())
        self.assertEqual(restored.mode, Mode.STRUCTURED)
        self.assertEqual(restored.text, "## Skills\n\nGo")


class TestCreateSession(unittest.TestCase):
    def setUp(self):
        self.storage_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.storage_dir)

    def test_uses_llm_by_default(self):
        session = create_session(Settings(storage_dir=self.storage_dir, cooldown_seconds=5))
        self.assertIsInstance(session.orchestrator.enhancer, LLMClient)
        self.assertEqual(session.limiter.window, 5)

    def test_uses_http_endpoint_when_configured(self):
        settings = Settings(storage_dir=self.storage_dir, enhance_url="https://resume.example.com")
        session = create_session(settings, snapshot={"state": {"skills": "Go"}})
        self.assertIsInstance(session.orchestrator.enhancer, HttpEnhancementService)
        self.assertEqual(session.state.skills, "Go")

    def test_saved_resume_opens_as_free_text(self):
        LocalResumeStore(self.storage_dir).path.write_text("## Skills\n\nSaved", encoding="utf-8")

        session = create_session(Settings(storage_dir=self.storage_dir))
        self.assertEqual(session.mode, Mode.FREEFORM)
        self.assertEqual(session.text, "## Skills\n\nSaved")

    def test_save_without_api_key_succeeds(self):
        with patch.dict(os.environ, {}, clear=True):
            session = create_session(Settings(storage_dir=self.storage_dir))
            session.set_field("skills", "Python")
            result = asyncio.run(session.save())
        self.assertEqual(result.saved_text, "## Skills\n\nPython")
        self.assertIsNone(session.ats_score)


class TestNormalizeText(unittest.TestCase):
    def test_collapses_blank_runs(self):
        self.assertEqual(normalize_text("a\n\n\n\nb\n \t\nc"), "a\n\nb\n\nc")


if __name__ == '__main__':
    unittest.main()
