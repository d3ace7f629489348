"""Plain-text extraction from résumé files (PDF, DOCX, TXT)."""
from __future__ import annotations

import re
import shutil
import subprocess
import zipfile
from pathlib import Path
from typing import Callable, Iterator
from xml.etree import ElementTree

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from jobassist.errors import InvalidRequest
from jobassist.log import get_logger

log = get_logger(__name__)

_WORD_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
_PDFTOTEXT_TIMEOUT = 30

# below this share of spaces the PDF text layer has lost its word breaks
_MIN_SPACE_RATIO = 0.08
_SPACING_RULES = [
    (re.compile(r"(?<=[a-z])(?=[A-Z])"), " "),
    (re.compile(r"(?<=[A-Za-z])(?=\d)|(?<=\d)(?=[A-Za-z])"), " "),
    (re.compile(r"(?<=[.!?,;:])(?=[A-Za-z])"), " "),
]


def fix_spacing(text: str) -> str:
    """Put word breaks back into text whose spaces were dropped by the PDF layer."""
    if len(text) < 50 or text.count(" ") / len(text) > _MIN_SPACE_RATIO:
        return text
    log.debug("Re-spacing %d chars of run-together PDF text", len(text))
    for pattern, repl in _SPACING_RULES:
        text = pattern.sub(repl, text)
    return text


# pdftotext ends every page with a form feed; DOCX can carry stray control chars
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")
_BLANK_RUNS = re.compile(r"\n{3,}")


def tidy_text(text: str) -> str:
    """Normalize extracted text before it is sent for résumé parsing.

    Form feeds become line breaks and runs of empty lines collapse to one.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")
    text = _CONTROL_CHARS.sub("", text)
    lines = (line.rstrip() for line in text.split("\n"))
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()


def _read_txt(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="ignore")


def _pdftotext(path: Path) -> str | None:
    binary = shutil.which("pdftotext")
    if binary is None:
        return None
    try:
        proc = subprocess.run(
            [binary, "-layout", str(path), "-"],
            capture_output=True,
            text=True,
            timeout=_PDFTOTEXT_TIMEOUT,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        log.debug("pdftotext unusable for %s: %s", path.name, exc)
        return None
    return proc.stdout if proc.returncode == 0 and proc.stdout.strip() else None


def _read_pdf(path: Path) -> str:
    layout = _pdftotext(path)
    if layout is not None:
        return layout
    try:
        pages = PdfReader(str(path)).pages
        return "\n".join(fix_spacing(page.extract_text() or "") for page in pages)
    except PdfReadError as exc:
        raise InvalidRequest(f"cannot read PDF {path.name}: {exc}") from exc


def _docx_paragraphs(root: ElementTree.Element) -> Iterator[str]:
    for para in root.iter(f"{_WORD_NS}p"):
        line = "".join(run.text for run in para.iter(f"{_WORD_NS}t") if run.text)
        if line:
            yield line


def _read_docx(path: Path) -> str:
    try:
        with zipfile.ZipFile(path) as archive, archive.open("word/document.xml") as body:
            root = ElementTree.parse(body).getroot()
    except (zipfile.BadZipFile, KeyError, ElementTree.ParseError) as exc:
        raise InvalidRequest(f"cannot read DOCX {path.name}: {exc}") from exc
    return "\n".join(_docx_paragraphs(root))


_READERS: dict[str, Callable[[Path], str]] = {
    ".pdf": _read_pdf,
    ".docx": _read_docx,
    ".txt": _read_txt,
}
SUPPORTED_SUFFIXES = tuple(_READERS)


def extract_text(path: Path) -> str:
    """Return the plain text of a PDF, DOCX or TXT résumé.

    Raises ``InvalidRequest`` for a missing file, an unsupported or
    unreadable format, or a file with no extractable text.
    """
    path = Path(path)
    if not path.is_file():
        raise InvalidRequest(f"résumé file not found: {path}")
    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        expected = ", ".join(SUPPORTED_SUFFIXES)
        raise InvalidRequest(f"unsupported résumé format {path.suffix or '(none)'}; expected {expected}")

    text = tidy_text(reader(path))
    if not text.strip():
        raise InvalidRequest(f"no text could be extracted from {path.name}")
    log.debug("Extracted %d chars from %s", len(text), path.name)
    return text
