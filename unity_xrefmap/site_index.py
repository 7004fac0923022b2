"""Index page — an ``index.html`` linking every xrefmap under the output root."""

from __future__ import annotations

import re
from html import escape
from pathlib import Path

_VERSION_DIR_RE = re.compile(r"^(\d{4})\.(\d+)$")


def collect_map_paths(output_root: str | Path) -> list[str]:
    """Return ``<version>/xrefmap.yml`` paths present under the root, newest first.

    Maps from earlier runs are included, so a run restricted to a few
    versions still produces a complete index.
    """
    root = Path(output_root)
    if not root.is_dir():
        return []

    found = []
    for child in root.iterdir():
        match = _VERSION_DIR_RE.match(child.name)
        if match and (child / "xrefmap.yml").is_file():
            key = (int(match.group(1)), int(match.group(2)))
            found.append((key, f"{child.name}/xrefmap.yml"))
    return [path for _, path in sorted(found, reverse=True)]


def generate_index_page(map_paths: list[str]) -> str:
    """Render a minimal HTML page with one link per xrefmap.

    Args:
        map_paths: Paths relative to the output root, e.g. ``2021.3/xrefmap.yml``.
    """
    lines = ["<html>", "<body>", "<ul>"]
    for map_path in map_paths:
        text = escape(map_path)
        lines.append(f'<li><a href="{text}">{text}</a></li>')
    lines += ["</ul>", "</body>", "</html>"]
    return "\n".join(lines) + "\n"


def write_index_page(output_root: str | Path) -> Path:
    """Write ``index.html`` for every map currently under ``output_root``."""
    root = Path(output_root)
    root.mkdir(parents=True, exist_ok=True)
    path = root / "index.html"
    path.write_text(generate_index_page(collect_map_paths(root)), encoding="utf-8")
    return path
