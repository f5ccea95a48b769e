"""Progress reporting for large uploads."""

import logging
from typing import Optional


logger = logging.getLogger(__name__)

# Files at or below this size are sent without a progress monitor
PROGRESS_THRESHOLD_BYTES = 100 * 1024


class ProgressMonitor:
    """Callable passed to ``SFTPClient.put`` as its ``callback``.

    paramiko invokes it with the cumulative number of bytes sent and the
    total size. A line is logged every time another ``step_percent`` of
    the file has gone out.
    """
    
    def __init__(self, name: str, total: int, step_percent: int = 10):
        self.name = name
        self.total = total
        self.step_percent = step_percent
        self.transferred = 0
        self._next_report = step_percent
    
    def __call__(self, transferred: int, total: Optional[int] = None) -> None:
        if total:
            self.total = total
        self.transferred = max(self.transferred, transferred)
        if not self.total:
            return
        
        percent = self.transferred * 100 // self.total
        if percent >= self._next_report:
            logger.info(f"{self.name}: {percent}% ({self.transferred}/{self.total} bytes)")
            self._next_report = (percent // self.step_percent + 1) * self.step_percent
    
    @property
    def complete(self) -> bool:
        return self.total > 0 and self.transferred >= self.total


def should_track_progress(verbose: bool, size: int) -> bool:
    """Progress is only worth tracking for verbose transfers above the threshold."""
    return verbose and size > PROGRESS_THRESHOLD_BYTES
