"""Turn a proposal file into the plain text the section extractor consumes."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator, Union

import structlog
from docx import Document
from docx.document import Document as DocxDocument
from docx.oxml.table import CT_Tbl
from docx.oxml.text.paragraph import CT_P
from docx.table import Table
from docx.text.paragraph import Paragraph

from utils.error_handler import InputError
from utils.text import normalize_text

logger = structlog.get_logger(__name__)

SUPPORTED_SUFFIXES = (".txt", ".md", ".docx", ".pdf", ".html", ".htm")


def _iter_block_items(doc: DocxDocument) -> Iterator[Union[Paragraph, Table]]:
    for child in doc.element.body.iterchildren():
        if isinstance(child, CT_P):
            yield Paragraph(child, doc)
        elif isinstance(child, CT_Tbl):
            yield Table(child, doc)


def _table_to_text(table: Table) -> str:
    rows = []
    for row in table.rows:
        cells = [cell.text.strip() for cell in row.cells]
        rows.append("\t".join(cells))
    return "\n".join(rows)


def _load_docx(path: Path) -> str:
    doc = Document(str(path))
    lines: list[str] = []
    for block in _iter_block_items(doc):
        if isinstance(block, Paragraph):
            lines.append(block.text)
        else:
            lines.append(_table_to_text(block))
    return "\n".join(lines)


def _load_pdf(path: Path) -> str:
    from pypdf import PdfReader

    reader = PdfReader(str(path))
    pages = []
    for page in reader.pages:
        text = (page.extract_text() or "").strip()
        if text:
            pages.append(text)
    return "\n\n".join(pages)


def _load_html(path: Path) -> str:
    from bs4 import BeautifulSoup

    html = path.read_text(encoding="utf-8", errors="ignore")
    soup = BeautifulSoup(html, "lxml")
    for tag in soup(["script", "style"]):
        tag.decompose()
    text = soup.get_text("\n")
    return re.sub(r"\n{3,}", "\n\n", text)


def load_document_text(path: Union[str, Path]) -> str:
    """Read a .txt/.md/.docx/.pdf/.html proposal and return normalized text.

    Raises InputError for a missing file, an unsupported format, a file that
    cannot be parsed, or one that yields no text.
    """
    path = Path(path)
    if not path.exists():
        raise InputError(f"File not found: {path}", path=str(path))

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise InputError(
            f"Unsupported document format: {suffix or '<none>'}. Supported: {', '.join(SUPPORTED_SUFFIXES)}",
            path=str(path),
        )

    logger.info("document_load_started", path=str(path), file_type=suffix)
    try:
        if suffix == ".docx":
            raw = _load_docx(path)
        elif suffix == ".pdf":
            raw = _load_pdf(path)
        elif suffix in {".html", ".htm"}:
            raw = _load_html(path)
        else:
            raw = path.read_text(encoding="utf-8", errors="ignore")
    except Exception as e:
        logger.error("document_load_failed", path=str(path), error=str(e))
        raise InputError(f"Failed to parse document: {path.name}", path=str(path)) from e

    text = normalize_text(raw)
    if not text.strip():
        raise InputError(f"Document contains no text: {path.name}", path=str(path))

    logger.info("document_loaded", path=str(path), chars=len(text))
    return text
