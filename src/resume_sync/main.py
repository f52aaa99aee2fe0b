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
Main entry point for the resume-sync CLI.

Every command loads the session snapshot, runs one operation, writes the
snapshot back and shows the resulting document.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.rule import Rule

from resume_sync.config import Settings
from resume_sync.errors import EnhancementError, EnhancementReason, ResumeSyncError
from resume_sync.models import RenderHint, SectionKind
from resume_sync.session import ResumeSession, create_session

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT = "user_content/session.json"


class ConsoleDisplay:
    """
    Display surface for the terminal.
    PREVIEW renders Markdown, EDIT shows the raw text, SPLIT shows both.
    """
    def __init__(self, console: Console):
        self.console = console

    def show(self, text: str, hint: RenderHint) -> None:
        if not text:
            self.console.print("[dim](empty resume)[/dim]")
            return
        if hint in (RenderHint.EDIT, RenderHint.SPLIT):
            self.console.print(text, markup=False, highlight=False)
        if hint == RenderHint.SPLIT:
            self.console.print(Rule("preview"))
        if hint in (RenderHint.PREVIEW, RenderHint.SPLIT):
            self.console.print(Markdown(text))


def setup_logging(verbosity: int, quiet: bool = False, log_dir: str = "user_content/logs"):
    """
    Configures logging:
    - File: user_content/logs/resume_sync.log (DEBUG)
    - Console: Default=INFO, -q=ERROR, -v=INFO, -vv=DEBUG
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    # Root Logger
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # File Handler (Always DEBUG)
    file_handler = logging.FileHandler(log_path / "resume_sync.log")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root.addHandler(file_handler)

    if quiet:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    else:
        level = logging.INFO

    console_handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(console_handler)

    # Silence some noisy libs if not in super debug
    if verbosity < 3:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def load_snapshot(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_snapshot(path: Path, session: ResumeSession) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(session.to_snapshot(), f, indent=2, ensure_ascii=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keep a resume in sync between form fields and Markdown")
    parser.add_argument("--snapshot", default=DEFAULT_SNAPSHOT, help=f"Session snapshot file (default: {DEFAULT_SNAPSHOT})")
    parser.add_argument("--enhance-url", help="Base URL of a remote enhancement service (default: call the LLM directly)")
    parser.add_argument("--cooldown", type=float, help="Seconds between enhancement requests (default: 60)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase output verbosity (-v=INFO, -vv=DEBUG)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress status output (ERROR only)")
    parser.add_argument("--ca-bundle", help="Path to a custom CA certificate bundle for HTTPS verification (proxy environments)")

    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Show the current document")
    show.add_argument("--view", choices=[h.value for h in RenderHint], help="Override the render hint")

    set_cmd = sub.add_parser("set", help="Set a structured field (e.g. summary, contactInfo.email, experience)")
    set_cmd.add_argument("path")
    set_cmd.add_argument("value", help="Field value; for entry lists pass a JSON array")

    sub.add_parser("freeform", help="Switch to freeform Markdown editing")
    sub.add_parser("structured", help="Switch back to the form; discards Markdown edits")

    edit = sub.add_parser("edit", help="Replace the freeform Markdown with a file's contents")
    edit.add_argument("file")

    improve = sub.add_parser("improve", help="Improve one section with AI")
    improve.add_argument("section", choices=[k.value for k in SectionKind])

    sub.add_parser("enhance", help="Enhance the entire resume with AI")

    import_cmd = sub.add_parser("import", help="Import an existing resume (PDF or DOCX)")
    import_cmd.add_argument("file")

    sub.add_parser("save", help="Save the document (and score it)")

    template = sub.add_parser("template", help="Start from a template (modern, professional, minimal, creative)")
    template.add_argument("template_id")

    sub.add_parser("delete", help="Delete the saved resume and reset the session")
    return parser


async def run_command(args, session: ResumeSession, console: Console) -> None:
    if args.command == "set":
        value = json.loads(args.value) if args.path in ("experience", "education", "projects") else args.value
        session.set_field(args.path, value)
    elif args.command == "freeform":
        session.enter_freeform()
    elif args.command == "structured":
        change = session.enter_structured()
        if change.warning:
            console.print(f"[yellow]{change.warning}[/yellow]")
    elif args.command == "edit":
        session.edit_text(Path(args.file).read_text(encoding="utf-8"))
    elif args.command == "improve":
        await session.improve_section(SectionKind(args.section))
    elif args.command == "enhance":
        await session.enhance_whole_document()
    elif args.command == "import":
        data = Path(args.file).read_bytes()
        await session.import_from_file(data, Path(args.file).name)
    elif args.command == "save":
        result = await session.save()
        if result.ats_score is not None:
            console.print(f"ATS Score: {result.ats_score}")
            feedback = result.feedback or {}
            for strength in feedback.get("strengths", []):
                console.print(f"  [green]+ {strength}[/green]")
            for improvement in feedback.get("improvements", []):
                console.print(f"  [yellow]- {improvement}[/yellow]")
    elif args.command == "template":
        await session.apply_template(args.template_id)
    elif args.command == "delete":
        await session.delete()


def main():
    try:
        _main_cli()
    except KeyboardInterrupt:
        # Use stderr so it captures attention even if stdout is redirected
        sys.stderr.write("\n\033[31m[-] Cancelled by user\033[0m\n")
        sys.exit(130)


def _main_cli():
    parser = build_parser()
    args = parser.parse_args()

    setup_logging(args.verbose, quiet=args.quiet)

    settings = Settings.from_env()
    if args.ca_bundle:
        settings.ca_bundle_override = args.ca_bundle
        logger.info(f"CA bundle override set to: {args.ca_bundle}")
    if args.enhance_url:
        settings.enhance_url = args.enhance_url
    if args.cooldown is not None:
        settings.cooldown_seconds = args.cooldown

    console = Console()
    snapshot_path = Path(args.snapshot)

    try:
        session = create_session(settings, load_snapshot(snapshot_path))
        asyncio.run(run_command(args, session, console))
    except EnhancementError as e:
        if e.reason == EnhancementReason.RATE_LIMITED:
            logger.error(f"Rate limited: {e.message}")
        else:
            logger.error(f"Enhancement failed: {e.message}")
        sys.exit(1)
    except (ResumeSyncError, json.JSONDecodeError, OSError) as e:
        logger.error(f"{e}")
        sys.exit(1)

    write_snapshot(snapshot_path, session)

    frame = session.controller.frame()
    hint = RenderHint(args.view) if getattr(args, "view", None) else frame.hint
    ConsoleDisplay(console).show(frame.text, hint)


if __name__ == "__main__":
    main()
