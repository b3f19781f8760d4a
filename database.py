import json
import logging
import os
import tempfile
from typing import Any, Optional

from bson import ObjectId

logger = logging.getLogger(__name__)


def new_id() -> str:
    """Unique, increasing record id; safe for rapid successive creations."""
    return str(ObjectId())


class LocalStore:
    """Key-value store keeping one JSON document per key in a data directory.

    Reads never raise: a missing or unreadable key yields the caller's default.
    Writes never raise either; a failed write is logged and the caller keeps
    its in-memory value for the rest of the session.
    """

    def __init__(self, base_dir: str = "data"):
        self.base_dir = base_dir

    def path_for(self, key: str) -> str:
        return os.path.join(self.base_dir, f"{key}.json")

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return default
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, using default: %s", path, e)
            return default

    def set(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp_path = None
        try:
            os.makedirs(self.base_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=self.base_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
            tmp_path = None
        except (OSError, TypeError, ValueError) as e:
            logger.error("Could not save %s, changes kept in memory only: %s", path, e)
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)
