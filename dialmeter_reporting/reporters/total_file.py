"""
Total File Reporter
===================

Bounded Context: Displayed-total persistence

Keeps a one-number text file holding the displayed meter total. The file
is overwritten at every minute flush and read once at startup to seed the
base offset, so a restart resumes from the last persisted total.

Design:
- Atomic overwrite (temp file + os.replace): a crash never leaves a
  truncated total behind
- Forced snapshots are not persisted
"""

import os
from pathlib import Path
from typing import Optional, Union

from .base import BaseReporter
from ..logging import StructuredLogger, LogEvent
from ..schemas import Snapshot, SnapshotKind


class TotalFileReporter(BaseReporter):
    """
    Persists the displayed total to a text file.

    Attributes:
        path: Total value file
    """

    kinds = {SnapshotKind.FLUSH}

    def __init__(self, path: Union[str, Path], logger: StructuredLogger):
        super().__init__(logger=logger)
        self.path = Path(path).expanduser()

    def write(self, snapshot: Snapshot) -> bool:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(f"{snapshot.total:8.2f}")
            os.replace(tmp, self.path)
        except OSError as e:
            self.logger.error(
                event=LogEvent.PERSIST_FILE_FAILED,
                message="Cannot write total file",
                exc_info=e,
                metadata={'path': str(self.path), 'total': snapshot.displayed_total}
            )
            return False

        self.logger.debug(
            event=LogEvent.PERSIST_FILE_WRITTEN,
            message="Total file written",
            metadata={'path': str(self.path), 'total': snapshot.displayed_total}
        )
        return True

    @staticmethod
    def read_total(path: Union[str, Path]) -> Optional[float]:
        """
        Read a previously persisted total.

        Returns:
            The stored value, or None if the file is missing or unreadable
        """
        try:
            text = Path(path).expanduser().read_text()
        except OSError:
            return None

        try:
            return float(text.strip())
        except ValueError:
            return None


def resolve_base_offset(
    start_value: Optional[float],
    total_file: Optional[Union[str, Path]],
    logger: StructuredLogger,
) -> float:
    """
    Decide the base offset for this run.

    Precedence: explicit start value > persisted total file > 0.0.
    """
    if start_value is not None:
        source = "start_value"
        base = float(start_value)
    else:
        stored = TotalFileReporter.read_total(total_file) if total_file else None
        if stored is None:
            source = "default"
            base = 0.0
            if total_file:
                logger.warning(
                    event=LogEvent.PERSIST_BASE_LOADED,
                    message="No usable total file, starting from 0.0",
                    metadata={'path': str(total_file)}
                )
        else:
            source = "total_file"
            base = stored

    logger.info(
        event=LogEvent.PERSIST_BASE_LOADED,
        message=f"Base offset {base:.2f} ({source})",
        metadata={'base_offset': base, 'source': source}
    )
    return base
