"""Persisted corpus + search index snapshot."""
import json
import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError

from .models import Document, Snapshot
from .search_index import SearchIndex

logger = logging.getLogger(__name__)


def dump_snapshot(corpus: List[Document], index: SearchIndex) -> str:
    """Serialize deterministically: docs sorted by key, JSON keys sorted."""
    snapshot = Snapshot(
        docs=sorted(corpus, key=lambda doc: doc.key),
        index=index.to_dict(),
    )
    return json.dumps(snapshot.model_dump(mode="json"), sort_keys=True)


def save_snapshot(path: Path, corpus: List[Document], index: SearchIndex) -> None:
    """
    Overwrite the snapshot file.

    The file is written next to the target and renamed over it, so a
    crash mid-write leaves the previous snapshot intact.

    Raises:
        OSError: if the file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")

    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(dump_snapshot(corpus, index))
    os.replace(tmp_path, path)

    logger.info(f"Saved {len(corpus)} documents to {path}")


def load_snapshot(path: Path) -> Optional[Tuple[List[Document], SearchIndex]]:
    """
    Load a snapshot written by `save_snapshot`.

    Returns:
        (corpus, index), or None if the file is absent or unreadable
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No snapshot at {path}")
        return None

    try:
        with open(path, "r", encoding="utf-8") as f:
            snapshot = Snapshot.model_validate(json.load(f))
        index = SearchIndex.from_dict(snapshot.index)
    except (OSError, ValueError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable snapshot {path}: {e}")
        return None

    logger.info(f"Loaded {len(snapshot.docs)} documents from {path}")
    return snapshot.docs, index
