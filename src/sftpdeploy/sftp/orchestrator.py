"""Entry point for a transfer: dispatches a request over one SFTP channel."""

import logging
import time
from contextlib import contextmanager
from typing import List, Optional, Tuple, Union

import paramiko
from paramiko import SFTPClient, SSHClient, Transport

from ..config.models import PermissionModes
from ..utils.progress import ProgressMonitor
from .errors import (
    PROTOCOL_ERRORS, TransferError, TransferConnectionError,
    DirectoryTransferError, translate_errors
)
from .remote import RemoteDirectoryEnsurer, RemoteWorkingDirectory
from .request import SingleFileTransfer, DirectoryListTransfer, TransferRequest
from .uploader import FileUploader, DirectoryUploader, TransferSummary, ProgressFactory


logger = logging.getLogger(__name__)


class TransferOrchestrator:
    """Runs one TransferRequest over an already connected SSH session.

    The SFTP channel is opened when ``execute`` starts and closed before it
    returns or raises.
    """
    
    def __init__(self,
                 session: Union[SSHClient, Transport],
                 request: TransferRequest,
                 modes: Optional[PermissionModes] = None,
                 verbose: bool = False,
                 progress_factory: ProgressFactory = ProgressMonitor):
        """
        Initialize the orchestrator.
        
        Args:
            session: Connected ``SSHClient`` or ``Transport`` to open the channel on
            request: What to upload and where
            modes: Directory and file permission modes, 755/644 by default
            verbose: Log per-file and per-directory progress
            progress_factory: Builds progress callbacks for large files
        """
        self.session = session
        self.request = request
        self.modes = modes or PermissionModes()
        self.verbose = verbose
        
        self.ensurer = RemoteDirectoryEnsurer(self.modes.dir_mode)
        self.file_uploader = FileUploader(self.modes.file_mode, verbose, progress_factory)
        self.directory_uploader = DirectoryUploader(self.file_uploader, self.ensurer)
    
    def execute(self) -> TransferSummary:
        """
        Carry out the transfer.
        
        Returns:
            Counters for what was sent
            
        Raises:
            TransferError: If any remote operation fails
            TypeError: If the request is not a known request type
        """
        if not isinstance(self.request, (SingleFileTransfer, DirectoryListTransfer)):
            raise TypeError(f"Unsupported transfer request: {type(self.request).__name__}")
        
        start = time.monotonic()
        with self._open_channel() as channel:
            if isinstance(self.request, DirectoryListTransfer):
                summary = self._transfer_directories(channel, self.request)
            else:
                summary = self._transfer_file(channel, self.request)
        
        summary.elapsed = time.monotonic() - start
        logger.info("done.")
        return summary
    
    @contextmanager
    def _open_channel(self):
        """Open the SFTP channel and close it on every exit path."""
        with translate_errors(TransferConnectionError,
                              "Could not open SFTP channel",
                              remote_path=self.request.remote_path,
                              component="TransferOrchestrator",
                              operation="open_channel"):
            if isinstance(self.session, Transport):
                channel = SFTPClient.from_transport(self.session)
                if channel is None:
                    raise paramiko.SSHException("server refused the SFTP subsystem")
            else:
                channel = self.session.open_sftp()
        
        try:
            yield channel
        finally:
            self._close_channel(channel)
    
    def _close_channel(self, channel: SFTPClient):
        try:
            channel.close()
        except PROTOCOL_ERRORS as e:
            logger.warning(f"Error closing SFTP channel: {e}")
    
    def _transfer_file(self, channel: SFTPClient, request: SingleFileTransfer) -> TransferSummary:
        size = self.file_uploader.send(channel, request.local_file, request.remote_path)
        return TransferSummary(files=1, bytes_sent=size)
    
    def _transfer_directories(self, channel: SFTPClient,
                              request: DirectoryListTransfer) -> TransferSummary:
        """
        Upload every tree into the remote base path.
        
        A failure in one top-level directory does not stop the others;
        all failures are reported together once the list is done.
        """
        self.ensurer.ensure(channel, request.remote_path)
        cwd = RemoteWorkingDirectory(channel, request.remote_path)
        
        summary = TransferSummary()
        failures: List[Tuple[str, TransferError]] = []
        
        for directory in request.directories:
            # every tree starts from the base, whatever the previous one left behind
            cwd.change_to_base()
            if self.verbose:
                logger.info(f"Sending directory {directory}")
            try:
                self.directory_uploader.upload(channel, directory, cwd, summary)
            except TransferError as e:
                failures.append((directory.name, e))
        
        if failures:
            names = ", ".join(f"'{name}'" for name, _ in failures)
            first_name, first_error = failures[0]
            if len(failures) == 1:
                message = f"Error sending directory {names} - {first_error}"
            else:
                message = f"Error sending directories {names}"
            raise DirectoryTransferError(
                message,
                remote_path=request.remote_path,
                local_path=first_name,
                failures=failures
            ) from first_error
        
        return summary
