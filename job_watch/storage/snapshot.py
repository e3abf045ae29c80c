"""JSON snapshot file holding the tracker's seen-job mapping."""

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger("job_watch.storage")


class SnapshotError(Exception):
    """The snapshot could not be read, parsed or written."""


class SnapshotStore:
    """Whole-file load/save of a single JSON object.

    Every save rewrites the file in full; there is no append or merge.
    """

    def __init__(self, path: str = "data/seen-jobs.json"):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> dict:
        """Read the snapshot. A missing file is an empty mapping."""
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise SnapshotError(f"Cannot read snapshot {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotError(
                f"Snapshot {self.path} holds {type(data).__name__}, expected an object"
            )
        return data

    def save(self, data: dict) -> None:
        """Overwrite the snapshot with ``data`` (pretty-printed UTF-8 JSON)."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file first so a crash never leaves half a file
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                    f.write("\n")
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise SnapshotError(f"Cannot write snapshot {self.path}: {e}") from e
