"""Device-local key/value storage: one JSON file per key under the data directory.

Access is synchronous and single-writer (one device, one active process).
Reads never fail: a missing or unreadable blob reads as ``None`` and the
calling repository substitutes its entity default.
"""
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

from mealsync.infra.paths import DATA_DIR, blob_path

logger = logging.getLogger(__name__)


class LocalStorage:
    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir or DATA_DIR)

    def get_item(self, key: str) -> Any:
        path = blob_path(self.data_dir, key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable local blob '{key}', using default: {e}")
            return None

    def set_item(self, key: str, value: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.data_dir), prefix=f".{key}_", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                json.dump(value, tmp, indent=2, ensure_ascii=False)
            shutil.move(tmp_path, blob_path(self.data_dir, key))
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def remove_item(self, key: str) -> None:
        path = blob_path(self.data_dir, key)
        if path.exists():
            path.unlink()

    def has_item(self, key: str) -> bool:
        return blob_path(self.data_dir, key).exists()
