"""Transfer requests: what to upload and where."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Tuple, Union

from .local import LocalDirectory


@dataclass(frozen=True)
class SingleFileTransfer:
    """Upload one local file to one remote path."""
    local_file: Path
    remote_path: str

    def __post_init__(self):
        if not self.remote_path:
            raise ValueError("remote_path must not be empty")
        object.__setattr__(self, 'local_file', Path(self.local_file))


@dataclass(frozen=True)
class DirectoryListTransfer:
    """Upload the contents of several local trees below one remote base path."""
    directories: Tuple[LocalDirectory, ...]
    remote_path: str

    def __post_init__(self):
        if not self.remote_path:
            raise ValueError("remote_path must not be empty")
        object.__setattr__(self, 'directories', tuple(self.directories))

    @classmethod
    def from_paths(cls, paths: Iterable[Union[str, Path]], remote_path: str) -> 'DirectoryListTransfer':
        """Scan each local path and build a request from the resulting trees."""
        return cls(tuple(LocalDirectory.scan(p) for p in paths), remote_path)


TransferRequest = Union[SingleFileTransfer, DirectoryListTransfer]
