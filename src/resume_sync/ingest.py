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
Handles ingestion of uploaded resumes (PDF, DOCX).
"""

import io
import logging
import zipfile
from typing import Any, Dict, Optional

from docx import Document
from pypdf import PdfReader

from resume_sync.errors import ParseError, UnsupportedFormatError
from resume_sync.llm_client import LLMClient

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"
ZIP_MAGIC = b"PK\x03\x04"
# Legacy Word 97-2003 (.doc) compound file
OLE_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def detect_format(data: bytes, filename: Optional[str] = None) -> str:
    """
    Sniffs the file contents; the filename is only used for error messages.
    Returns "pdf" or "docx".
    """
    label = filename or "uploaded file"
    if not data:
        raise UnsupportedFormatError(f"{label} is empty")

    if data.startswith(PDF_MAGIC):
        return "pdf"

    if data.startswith(ZIP_MAGIC):
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                if "word/document.xml" in archive.namelist():
                    return "docx"
        except zipfile.BadZipFile as e:
            raise ParseError(f"{label} looks like a DOCX file but is corrupt: {e}") from e

    if data.startswith(OLE_MAGIC):
        raise UnsupportedFormatError(f"{label} is a legacy .doc file. Please convert it to PDF or DOCX.")

    raise UnsupportedFormatError(f"{label} is not a PDF or DOCX file")


def read_docx(data: bytes) -> str:
    """
    Extracts text from a DOCX file, paragraphs then table cells.
    """
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        raise ParseError(f"Error reading DOCX: {e}") from e

    full_text = [para.text for para in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            full_text.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(full_text)


def read_pdf(data: bytes) -> str:
    """
    Extracts text from a PDF file.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        full_text = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise ParseError(f"Error reading PDF: {e}") from e
    return "\n".join(full_text)


def extract_text(data: bytes, filename: Optional[str] = None) -> str:
    fmt = detect_format(data, filename)
    text = read_pdf(data) if fmt == "pdf" else read_docx(data)
    if not text.strip():
        raise ParseError(f"No text could be extracted from {filename or 'the uploaded file'}")
    logger.debug(f"Extracted {len(text)} characters from {fmt.upper()}")
    return text


class DocumentImporter:
    """
    Import collaborator: bytes in, partial resume fields out.
    Text extraction is local; structuring the text is delegated to the LLM.
    """

    def __init__(self, llm: LLMClient):
        self.llm = llm

    async def parse_document(self, data: bytes, filename: Optional[str] = None) -> Dict[str, Any]:
        text = extract_text(data, filename)
        logger.info("Extracting resume sections...")
        return await self.llm.extract_sections(text)
