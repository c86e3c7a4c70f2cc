"""@gxp-* annotation scanner for source and test files.

A block starts at an ``@gxp-id:`` line and collects the type, title, risk
and trace markers that follow it, until the next id line or end of file:

    // @gxp-id: REF-DS-001
    // @gxp-type: DS
    // @gxp-title: JWT Token Generation
    // @gxp-traces: REF-FRS-001
    // @gxp-risk: Medium

Marker keywords are case-insensitive; identifiers are not.
"""

import logging
import os
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from tracegate.schemas.graph import Annotation

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = frozenset({".ts", ".tsx", ".js", ".jsx", ".py"})
DEFAULT_EXCLUDED_DIRS = frozenset(
    {"node_modules", "dist", "build", ".git", "__pycache__", ".venv", "venv"}
)
DEFAULT_TYPE = "TC"

ID_RE = re.compile(r"(?i:@gxp-id):\s*([A-Z0-9-]+)")
TYPE_RE = re.compile(r"(?i:@gxp-type):\s*(\w+)")
TRACES_RE = re.compile(r"(?i:@gxp-traces?):\s*([A-Z0-9,\s-]+)")
TITLE_RE = re.compile(r"(?i:@gxp-title):\s*(.+)")
RISK_RE = re.compile(r"(?i:@gxp-risk):\s*(\w+)")


class AnnotationAccumulator:
    """Holds at most one open block; flushes it on the next id or at EOF."""

    def __init__(self, file: str):
        self.file = file
        self._block: dict | None = None

    @property
    def is_open(self) -> bool:
        return self._block is not None

    def start(self, gxp_id: str, line: int) -> Annotation | None:
        """Open a new block, returning the block it replaces (if any)."""
        flushed = self.flush()
        self._block = {"gxp_id": gxp_id, "line": line, "traces": []}
        return flushed

    def set_field(self, name: str, value: str) -> None:
        # Markers seen before any id line are dropped
        if self._block is not None:
            self._block[name] = value

    def add_traces(self, ids: Iterable[str]) -> None:
        if self._block is not None:
            self._block["traces"].extend(ids)

    def flush(self) -> Annotation | None:
        block, self._block = self._block, None
        if not block or not block.get("gxp_id"):
            return None
        return Annotation(
            gxp_id=block["gxp_id"],
            type=block.get("type") or DEFAULT_TYPE,
            title=block.get("title"),
            description=block.get("description"),
            traces=block["traces"],
            risk=block.get("risk"),
            file=self.file,
            line=block["line"],
        )

    def feed(self, text: str, line: int) -> Annotation | None:
        """Apply one line; returns a block if this line closed one."""
        id_match = ID_RE.search(text)
        if id_match:
            return self.start(id_match.group(1), line)

        if self._block is None:
            return None

        type_match = TYPE_RE.search(text)
        if type_match:
            self.set_field("type", type_match.group(1))

        traces_match = TRACES_RE.search(text)
        if traces_match:
            ids = [s.strip() for s in traces_match.group(1).split(",")]
            self.add_traces(s for s in ids if s)

        title_match = TITLE_RE.search(text)
        if title_match:
            self.set_field("title", title_match.group(1).strip())

        risk_match = RISK_RE.search(text)
        if risk_match:
            self.set_field("risk", risk_match.group(1))
        return None


def extract_annotations(content: str, file: str) -> list[Annotation]:
    """Extract every annotation block from the text of one file."""
    acc = AnnotationAccumulator(file)
    annotations: list[Annotation] = []
    for line_number, text in enumerate(content.split("\n"), start=1):
        closed = acc.feed(text, line_number)
        if closed:
            annotations.append(closed)
    last = acc.flush()
    if last:
        annotations.append(last)
    return annotations


def extract_annotations_from_file(path: Path, display_path: str | None = None) -> list[Annotation]:
    """Read a file and extract its annotations; unreadable files yield none."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Skipping %s: %s", path, exc)
        return []
    return extract_annotations(content, display_path or str(path))


def iter_source_files(
    base_dir: Path,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> Iterator[Path]:
    """Files under base_dir with a matching suffix, in sorted path order."""
    suffixes = {e.lower() for e in extensions}
    excluded = set(excluded_dirs)
    found: list[Path] = []
    for root, dirs, files in os.walk(base_dir):
        dirs[:] = [d for d in dirs if d not in excluded]
        for name in files:
            if Path(name).suffix.lower() in suffixes:
                found.append(Path(root) / name)
    yield from sorted(found)


def scan_directory(
    base_dir: Path | str,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
    relative_to: Path | str | None = None,
) -> list[Annotation]:
    """Scan a directory tree; each matching file is read exactly once.

    When ``relative_to`` is given, annotation file paths are reported
    relative to it with forward slashes.
    """
    base = Path(base_dir)
    if not base.is_dir():
        return []
    anchor = Path(relative_to) if relative_to is not None else None
    annotations: list[Annotation] = []
    for path in iter_source_files(base, extensions, excluded_dirs):
        display = path.relative_to(anchor).as_posix() if anchor else str(path)
        annotations.extend(extract_annotations_from_file(path, display))
    logger.debug("Scanned %s: %d annotations", base, len(annotations))
    return annotations
