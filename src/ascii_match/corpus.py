"""Load the art corpus from disk.

Files are visited depth-first in lexical order so identifiers are stable for
a given tree. Identifiers are assigned sequentially from 0 to accepted files
only; oversized files are skipped before they reach the index.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ascii_match.errors import CorpusError
from ascii_match.search.models import ArtDocument


logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 3500


def iter_art_files(root: Path, suffix: str = ".txt") -> list[Path]:
    """Return art files below ``root`` in walk order."""

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.endswith(suffix):
                found.append(Path(dirpath) / filename)
    return found


def load_corpus(root: Path | str, *, max_bytes: int = DEFAULT_MAX_BYTES, suffix: str = ".txt") -> list[ArtDocument]:
    """Read every art file under ``root`` into an ``ArtDocument``.

    Raises:
        CorpusError: if ``root`` is not a directory or a file cannot be read.
    """

    root_path = Path(root)
    if not root_path.is_dir():
        msg = f"Art root {root_path} is not a directory"
        raise CorpusError(msg)

    documents: list[ArtDocument] = []
    skipped = 0
    for path in iter_art_files(root_path, suffix):
        try:
            raw = path.read_bytes()
        except OSError as exc:
            msg = f"Failed to read {path}: {exc}"
            raise CorpusError(msg) from exc

        if len(raw) > max_bytes:
            logger.info("skipping %s, too big: %d", path, len(raw))
            skipped += 1
            continue

        documents.append(
            ArtDocument(
                doc_id=len(documents),
                blob=raw.decode("utf-8", errors="replace"),
                tags=(path.name,),
                path=path,
            )
        )

    logger.info("Loaded %d art files from %s (%d skipped)", len(documents), root_path, skipped)
    return documents
