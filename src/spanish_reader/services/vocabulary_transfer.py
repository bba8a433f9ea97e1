"""Vocabulary export/import as JSON files."""

import json
import logging
from pathlib import Path
from typing import List

from spanish_reader.core import VocabularyItem
from spanish_reader.io import PersistenceGateway

logger = logging.getLogger(__name__)


async def export_vocabulary(gateway: PersistenceGateway, path: Path) -> int:
    """Write the whole collection to ``path`` and return the number of items."""
    items = await gateway.list_vocabulary()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.info("Exported %d vocabulary items to %s", len(items), path)
    return len(items)


def read_vocabulary_file(path: Path) -> List[VocabularyItem]:
    """Parse an exported vocabulary file.

    Raises:
        ValueError: If the file is not a JSON list of vocabulary records.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Not a valid vocabulary file: {e}") from e
    if not isinstance(data, list):
        raise ValueError("Vocabulary file must contain a JSON list")
    return [VocabularyItem.from_dict(raw) for raw in data if isinstance(raw, dict) and raw.get("word")]


async def import_vocabulary(gateway: PersistenceGateway, path: Path) -> int:
    """Import an exported file, skipping words already in the collection."""
    items = read_vocabulary_file(path)
    imported = await gateway.import_vocabulary(items)
    logger.info("Imported %d of %d vocabulary items from %s", imported, len(items), path)
    return imported
