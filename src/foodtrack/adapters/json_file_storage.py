"""JSON file storage for the meal ledger."""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from foodtrack.domain.errors import StorageError
from foodtrack.services.ledger import LedgerStorage


@dataclass
class JsonFileLedgerStorage(LedgerStorage):
    """Stores the ledger as a single JSON document named after its key."""

    directory: Path
    key: str = "meals"

    @property
    def path(self) -> Path:
        """Location of the stored collection."""
        return self.directory / f"{self.key}.json"

    def read(self) -> str | None:
        """Return the stored document, or None when it does not exist."""
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc

    def write(self, payload: str) -> None:
        """Atomically replace the stored document."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.key}.", suffix=".tmp", dir=self.directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc
