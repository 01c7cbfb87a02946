"""Key-value storage in a local JSON file."""

import json
from dataclasses import dataclass
from pathlib import Path

from calorie_snap.services.log_store import KeyValueStore


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps string values in one JSON object on disk, rewritten on every set."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        data = self._read()
        value = data.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a value and rewrite the file."""
        try:
            data = self._read()
        except ValueError:
            data = {}
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data
