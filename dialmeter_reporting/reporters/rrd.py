"""
RRD Update Reporter
===================

Bounded Context: Time-series persistence

Runs the external ``rrdtool update`` command once per minute flush with
the snapshot timestamp and displayed total.

Design:
- Argument list, no shell
- Bounded by a timeout so a hung command cannot stall the loop
- Exit status is logged, never raised
"""

import subprocess
from pathlib import Path
from typing import List, Union

from .base import BaseReporter
from ..logging import StructuredLogger, LogEvent
from ..schemas import Snapshot, SnapshotKind


class RrdUpdateReporter(BaseReporter):
    """
    Pushes the displayed total into an RRD database.

    Attributes:
        rrdtool_path: rrdtool executable
        rrd_file: Target database
        timeout: Seconds before the command is abandoned
    """

    kinds = {SnapshotKind.FLUSH}

    def __init__(
        self,
        rrd_file: Union[str, Path],
        logger: StructuredLogger,
        rrdtool_path: Union[str, Path] = "rrdtool",
        timeout: float = 10.0,
    ):
        super().__init__(logger=logger)
        self.rrd_file = Path(rrd_file).expanduser()
        self.rrdtool_path = str(rrdtool_path)
        self.timeout = timeout

    def build_command(self, snapshot: Snapshot) -> List[str]:
        """rrdtool update <file> <epoch>:<total>"""
        record = f"{int(snapshot.timestamp)}:{snapshot.displayed_total}"
        return [self.rrdtool_path, "update", str(self.rrd_file), record]

    def write(self, snapshot: Snapshot) -> bool:
        cmd = self.build_command(snapshot)
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            self.logger.error(
                event=LogEvent.PERSIST_RRD_FAILED,
                message="rrdtool update could not run",
                exc_info=e,
                metadata={'command': cmd}
            )
            return False

        if result.returncode != 0:
            self.logger.warning(
                event=LogEvent.PERSIST_RRD_FAILED,
                message=f"rrdtool update failed (rc={result.returncode})",
                metadata={
                    'command': cmd,
                    'stderr': result.stderr.decode(errors="replace").strip(),
                }
            )
            return False

        self.logger.debug(
            event=LogEvent.PERSIST_RRD_UPDATED,
            message="rrdtool update done",
            metadata={'command': cmd}
        )
        return True
