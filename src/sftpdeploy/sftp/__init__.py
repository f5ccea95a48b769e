"""SFTP module for uploading local files and trees."""

from .errors import (
    ErrorKind, TransferError, TransferConnectionError, RemoteDirectoryError,
    FileUploadError, PermissionModeError, DirectoryTransferError,
    translate, translate_errors
)
from .local import LocalDirectory
from .orchestrator import TransferOrchestrator
from .remote import RemoteDirectoryEnsurer, RemoteWorkingDirectory
from .request import SingleFileTransfer, DirectoryListTransfer, TransferRequest
from .session import SessionManager
from .uploader import FileUploader, DirectoryUploader, TransferSummary

__all__ = [
    'ErrorKind', 'TransferError', 'TransferConnectionError', 'RemoteDirectoryError',
    'FileUploadError', 'PermissionModeError', 'DirectoryTransferError',
    'translate', 'translate_errors',
    'LocalDirectory', 'TransferOrchestrator',
    'RemoteDirectoryEnsurer', 'RemoteWorkingDirectory',
    'SingleFileTransfer', 'DirectoryListTransfer', 'TransferRequest',
    'SessionManager', 'FileUploader', 'DirectoryUploader', 'TransferSummary'
]
