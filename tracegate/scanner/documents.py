"""Product manifest and specification document parsing (Markdown + YAML front matter)."""

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from tracegate.schemas.graph import ProductManifest, SpecDocument

logger = logging.getLogger(__name__)

PRODUCT_MANIFEST_FILE = "gxp-product.md"
DESCRIPTION_MAX_CHARS = 200
DESCRIPTION_MAX_LINES = 3

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.S | re.M)
_HEADING_RE = re.compile(r"^#\s+(.+)$", re.M)


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Return (front matter mapping, body). Bad YAML degrades to an empty mapping."""
    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text
    body = text[match.end():]
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        logger.warning("Ignoring malformed front matter: %s", exc)
        return {}, body
    if not isinstance(data, dict):
        return {}, body
    return data, body


def _as_str(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return str(value)


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return [str(value)]


def parse_product_manifest(path: Path) -> ProductManifest | None:
    """Parse gxp-product.md. Missing scalars fall back to defaults."""
    if not path.is_file():
        return None
    data, _ = split_front_matter(path.read_text(encoding="utf-8"))
    defaults = ProductManifest()
    sync = data.get("sync")
    gxp_metadata = data.get("gxp_metadata")
    return ProductManifest(
        product_name=_as_str(data.get("product_name"), defaults.product_name),
        version=_as_str(data.get("version"), defaults.version),
        product_code=_as_str(data.get("product_code"), defaults.product_code),
        id_schema=_as_str(data.get("id_schema"), defaults.id_schema),
        sync=sync if isinstance(sync, dict) else defaults.sync,
        gxp_metadata=gxp_metadata if isinstance(gxp_metadata, dict) else defaults.gxp_metadata,
    )


def extract_title(body: str, data: dict[str, Any]) -> str:
    match = _HEADING_RE.search(body)
    if match:
        return match.group(1).strip()
    return _as_str(data.get("title"), "Untitled")


def extract_description(body: str) -> str:
    """First few non-empty, non-heading lines, joined and truncated."""
    lines = [
        line.strip()
        for line in body.split("\n")
        if line.strip() and not line.startswith("#")
    ]
    description = " ".join(lines[:DESCRIPTION_MAX_LINES]).strip()
    return description[:DESCRIPTION_MAX_CHARS]


def parse_spec_text(text: str, file: str | None = None) -> SpecDocument:
    data, body = split_front_matter(text)
    return SpecDocument(
        gxp_id=_as_str(data.get("gxp_id") or data.get("gxp-id"), "UNKNOWN"),
        type=_as_str(data.get("type"), "URS"),
        title=extract_title(body, data),
        description=extract_description(body),
        traces=_as_list(data.get("traces") or data.get("traces-to")),
        risk=_as_str(data.get("risk"), "Medium"),
        file=file,
    )


def parse_spec_file(path: Path, display_path: str | None = None) -> SpecDocument | None:
    """Parse one specification document; unreadable files yield None."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Skipping spec %s: %s", path, exc)
        return None
    return parse_spec_text(text, display_path or str(path))
