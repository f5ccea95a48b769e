"""File and recursive directory upload over an open SFTP channel."""

import logging
import posixpath
import stat
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

from paramiko import SFTPClient

from ..utils.progress import ProgressMonitor, should_track_progress
from .errors import PROTOCOL_ERRORS, FileUploadError, PermissionModeError, translate_errors
from .local import LocalDirectory
from .remote import RemoteDirectoryEnsurer, RemoteWorkingDirectory


logger = logging.getLogger(__name__)

ProgressFactory = Callable[[str, int], Callable[[int, int], None]]


@dataclass
class TransferSummary:
    """Counters for one transfer run."""
    files: int = 0
    directories: int = 0
    bytes_sent: int = 0
    elapsed: float = 0.0


class FileUploader:
    """Sends one local file and applies the file mode to the remote copy."""
    
    def __init__(self, file_mode: int, verbose: bool = False,
                 progress_factory: ProgressFactory = ProgressMonitor):
        """
        Initialize the uploader.
        
        Args:
            file_mode: Permission bits applied to every uploaded file
            verbose: Log per-file lines, transfer statistics and progress
            progress_factory: Builds the ``put`` callback from (file name, size)
        """
        self.file_mode = file_mode
        self.verbose = verbose
        self.progress_factory = progress_factory
    
    def send(self, channel: SFTPClient, local_file: Union[str, Path],
             remote_path: Optional[str] = None, cwd: Optional[str] = None) -> int:
        """
        Upload ``local_file`` and chmod the result.
        
        Args:
            channel: Open SFTP channel
            local_file: File to send
            remote_path: Destination, defaults to the local file name in the channel's cwd.
                A directory (existing, or ending in ``/``) receives the file under its local name
            cwd: Remote working directory, only used to name the destination in logs and errors
            
        Returns:
            Number of bytes sent
            
        Raises:
            FileUploadError: If the file cannot be read or sent
            PermissionModeError: If the file mode cannot be applied
        """
        local_file = Path(local_file)
        
        with translate_errors(FileUploadError,
                              f"Could not read '{local_file}'",
                              remote_path=remote_path,
                              local_path=str(local_file),
                              component="FileUploader",
                              operation="stat_local"):
            size = local_file.stat().st_size
        
        if remote_path is None:
            remote_path = local_file.name
        else:
            remote_path = self._resolve_destination(channel, local_file, remote_path)
        display_path = posixpath.join(cwd, remote_path) if cwd else remote_path
        
        callback = None
        if should_track_progress(self.verbose, size):
            callback = self.progress_factory(local_file.name, size)
        
        if self.verbose:
            logger.info(f"Sending: {local_file.name} : {size}")
        
        with self._transfer_stats(size):
            with translate_errors(FileUploadError,
                                  f"Could not send '{local_file}' to '{display_path}'",
                                  remote_path=display_path,
                                  local_path=str(local_file),
                                  component="FileUploader",
                                  operation="put"):
                channel.put(str(local_file.absolute()), remote_path, callback=callback)
            
            with translate_errors(PermissionModeError,
                                  f"Could not set mode {oct(self.file_mode)} on '{display_path}'",
                                  remote_path=display_path,
                                  local_path=str(local_file),
                                  component="FileUploader",
                                  operation="chmod"):
                channel.chmod(remote_path, self.file_mode)
        
        return size
    
    def _resolve_destination(self, channel: SFTPClient, local_file: Path, remote_path: str) -> str:
        """Place the file inside ``remote_path`` when that names a directory."""
        if remote_path.endswith('/'):
            return posixpath.join(remote_path, local_file.name)
        try:
            attrs = channel.stat(remote_path)
        except PROTOCOL_ERRORS:
            # not there yet, or not inspectable; put reports real failures
            return remote_path
        if attrs.st_mode is not None and stat.S_ISDIR(attrs.st_mode):
            return posixpath.join(remote_path, local_file.name)
        return remote_path
    
    @contextmanager
    def _transfer_stats(self, size: int):
        """Log elapsed time and rate on exit, whether or not the transfer succeeded."""
        start = time.monotonic()
        try:
            yield
        finally:
            if self.verbose:
                elapsed = time.monotonic() - start
                rate = size / elapsed if elapsed > 0 else float(size)
                logger.info(f"File transfer time: {elapsed:.3f}s Average Rate: {rate:.1f} B/s")


class DirectoryUploader:
    """Depth-first upload of a local tree into the channel's working directory."""
    
    def __init__(self, file_uploader: FileUploader, ensurer: RemoteDirectoryEnsurer):
        self.file_uploader = file_uploader
        self.ensurer = ensurer
    
    def upload(self, channel: SFTPClient, directory: LocalDirectory,
               cwd: RemoteWorkingDirectory,
               summary: Optional[TransferSummary] = None) -> TransferSummary:
        """
        Upload the files of ``directory``, then recurse into each subdirectory.
        
        Subdirectories are addressed by name only, relative to the current
        remote directory. ``cwd.depth`` is the same on return as on entry,
        also when a nested transfer fails.
        
        Args:
            channel: Open SFTP channel positioned at ``cwd.current``
            directory: Local tree to send
            cwd: Remote working directory stack
            summary: Counters to add to; a new one is created when omitted
            
        Returns:
            The updated summary
        """
        if summary is None:
            summary = TransferSummary()
        
        for local_file in directory.iter_files():
            summary.bytes_sent += self.file_uploader.send(channel, local_file, cwd=cwd.current)
            summary.files += 1
        
        for subdirectory in directory.iter_directories():
            name = subdirectory.name
            self.ensurer.ensure(channel, name, display_path=cwd.path_of(name))
            with cwd.enter(name):
                self.upload(channel, subdirectory, cwd, summary)
            summary.directories += 1
        
        return summary
