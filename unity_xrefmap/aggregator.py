"""Metadata aggregator — turn a directory of DocFX metadata into one xrefmap.

docfx writes one ``*.yml`` file per type (plus a few non-reference documents
such as ``toc.yml``). Only files whose first line is the ManagedReference
marker are read; every item in them becomes an xrefmap reference, except the
``Overload:`` group records which have no page of their own.
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

import yaml

from unity_xrefmap.errors import MetadataError
from unity_xrefmap.models import SymbolRecord, XRefEntry
from unity_xrefmap.normalizer import DEFAULT_CHAIN, RewriteStep, normalize

logger = logging.getLogger(__name__)

MANAGED_REFERENCE_HEADER = "### YamlMime:ManagedReference"
XREFMAP_HEADER = "### YamlMime:XRefMap"
OVERLOAD_SENTINEL = "Overload:"


def is_managed_reference(path: Path) -> bool:
    """True when the file's first line is exactly the ManagedReference marker."""
    with open(path, "rb") as f:
        first_line = f.readline()
    return first_line.rstrip(b"\r\n") == MANAGED_REFERENCE_HEADER.encode("utf-8")


def read_symbol_records(path: Path) -> list[SymbolRecord]:
    """Parse one ManagedReference file into symbol records.

    Raises:
        MetadataError: If the YAML is malformed, ``items`` is missing, or an
            item lacks ``uid``/``commentId``.
    """
    try:
        with open(path, encoding="utf-8") as f:
            # Plain scalars stay strings: enum members named On/Off/Yes/No
            # must not resolve to booleans.
            document = yaml.load(f, Loader=yaml.BaseLoader)
    except yaml.YAMLError as e:
        raise MetadataError(path, f"invalid YAML: {e}") from e
    except UnicodeDecodeError as e:
        raise MetadataError(path, f"not valid UTF-8: {e}") from e

    if not isinstance(document, dict):
        raise MetadataError(path, "document is not a mapping")

    items = document.get("items")
    if not isinstance(items, list):
        raise MetadataError(path, "missing 'items' sequence")

    records = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise MetadataError(path, f"item {index} is not a mapping")
        try:
            records.append(SymbolRecord.from_item(item))
        except KeyError as e:
            raise MetadataError(path, f"item {index} has no {e.args[0]!r}") from e
    return records


def aggregate(
    metadata_dir: str | Path,
    base_url: str,
    chain: tuple[RewriteStep, ...] = DEFAULT_CHAIN,
) -> list[XRefEntry]:
    """Build the sorted reference list for one version.

    Args:
        metadata_dir: Directory holding the docfx ``*.yml`` output.
        base_url: ScriptReference root for the version.
        chain: Rewrite chain handed to the normalizer.

    Returns:
        Entries sorted by uid (ordinal). Duplicate uids are kept.
    """
    directory = Path(metadata_dir)
    if not directory.is_dir():
        raise MetadataError(directory, "metadata directory does not exist")

    entries: list[XRefEntry] = []

    for path in sorted(directory.glob("*.yml")):
        if not is_managed_reference(path):
            logger.debug("Skipping '%s' (not a ManagedReference document)", path.name)
            continue

        logger.debug("Reading '%s'", path.name)
        for record in read_symbol_records(path):
            if OVERLOAD_SENTINEL in record.comment_id:
                continue
            href = normalize(record.uid, record.comment_id, base_url, chain)
            entries.append(XRefEntry.from_record(record, href))

    entries.sort(key=lambda e: e.uid)

    duplicates = sorted(uid for uid, count in Counter(e.uid for e in entries).items() if count > 1)
    if duplicates:
        logger.warning(
            "%d duplicate uid(s) kept in output: %s",
            len(duplicates),
            ", ".join(duplicates[:10]) + (" ..." if len(duplicates) > 10 else ""),
        )

    return entries


def serialize_xrefmap(entries: list[XRefEntry]) -> str:
    """Render entries as an xrefmap document, header line included."""
    body = yaml.safe_dump(
        {"sorted": True, "references": [e.to_dict() for e in entries]},
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )
    return f"{XREFMAP_HEADER}\n{body}"


def write_xrefmap(entries: list[XRefEntry], output_path: str | Path) -> Path:
    """Write entries to ``output_path``, creating parent directories."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(serialize_xrefmap(entries))
    return path


def build_xrefmap(
    metadata_dir: str | Path,
    base_url: str,
    output_path: str | Path,
    chain: tuple[RewriteStep, ...] = DEFAULT_CHAIN,
) -> list[XRefEntry]:
    """Aggregate ``metadata_dir`` and write the result to ``output_path``."""
    entries = aggregate(metadata_dir, base_url, chain)
    logger.info("Saving XRef map to '%s' (%d references)", output_path, len(entries))
    write_xrefmap(entries, output_path)
    return entries
