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
Projects a DocumentState into Markdown.

Everything here is a pure function of its arguments: the same state always
produces byte-identical text.
"""

from typing import List

from resume_sync.models import ContactInfo, DocumentState, Entry

SECTION_SEPARATOR = "\n\n"
CONTACT_SEPARATOR = " | "
PRESENT_TOKEN = "Present"

ENTRY_HEADINGS = (
    ("experience", "Work Experience"),
    ("education", "Education"),
    ("projects", "Projects"),
)


def contact_markdown(contact: ContactInfo) -> str:
    parts = []
    if contact.name:
        parts.append(f"**{contact.name}**")
    if contact.email:
        parts.append(f"📧 {contact.email}")
    if contact.mobile:
        parts.append(f"📱 {contact.mobile}")
    if contact.linkedin:
        parts.append(f"💼 [LinkedIn]({contact.linkedin})")
    if contact.twitter:
        parts.append(f"🐦 [Twitter]({contact.twitter})")

    if not parts:
        return ""
    return f"## Contact Information\n\n{CONTACT_SEPARATOR.join(parts)}"


def date_range(entry: Entry) -> str:
    """Current entries get an open-ended range; their end date is ignored."""
    end = PRESENT_TOKEN if entry.is_current else entry.end_date
    if entry.start_date and end:
        return f"{entry.start_date} - {end}"
    return entry.start_date or end


def entry_markdown(entry: Entry) -> str:
    heading = f"### {entry.title}"
    if entry.subtitle:
        heading += f" @ {entry.subtitle}"

    lines = [heading]
    dates = date_range(entry)
    if dates:
        lines.append(dates)

    text = "\n".join(lines)
    if entry.description:
        text += f"\n\n{entry.description}"
    return text


def entries_to_markdown(entries: List[Entry], heading: str) -> str:
    if not entries:
        return ""
    body = SECTION_SEPARATOR.join(entry_markdown(e) for e in entries)
    return f"## {heading}\n\n{body}"


def project(state: DocumentState) -> str:
    """Builds the full document, section by section, in fixed order."""
    sections = [
        contact_markdown(state.contact_info),
        f"## Professional Summary\n\n{state.summary}" if state.summary else "",
        f"## Skills\n\n{state.skills}" if state.skills else "",
    ]
    for attr, heading in ENTRY_HEADINGS:
        sections.append(entries_to_markdown(getattr(state, attr), heading))

    return SECTION_SEPARATOR.join(s for s in sections if s)
