"""Transfer error types and translation of low-level protocol failures."""

import errno
from contextlib import contextmanager
from enum import Enum
from typing import List, Optional, Tuple, Type

import paramiko

from ..utils.error_handler import handle_error, ErrorCategory, ErrorSeverity


# Everything paramiko's SFTP client raises for a failed remote operation
PROTOCOL_ERRORS = (OSError, paramiko.SFTPError, paramiko.SSHException)


class ErrorKind(Enum):
    """What kind of operation a TransferError came from."""
    CONNECTION = "connection"
    REMOTE_DIRECTORY = "remote_directory"
    UPLOAD = "upload"
    PERMISSION = "permission"
    DIRECTORY = "directory"


class TransferError(Exception):
    """Base exception for transfer failures.

    The low-level failure is kept as ``__cause__`` (also exposed as ``cause``).
    """
    kind = ErrorKind.UPLOAD
    category = ErrorCategory.UNKNOWN

    def __init__(self, message: str, remote_path: Optional[str] = None,
                 local_path: Optional[str] = None):
        super().__init__(message)
        self.remote_path = remote_path
        self.local_path = local_path

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__


class TransferConnectionError(TransferError):
    """Raised when the session or SFTP channel cannot be established or used."""
    kind = ErrorKind.CONNECTION
    category = ErrorCategory.SFTP_CONNECTION


class RemoteDirectoryError(TransferError):
    """Raised when a remote directory cannot be inspected, created or entered."""
    kind = ErrorKind.REMOTE_DIRECTORY
    category = ErrorCategory.SFTP_DIRECTORY


class FileUploadError(TransferError):
    """Raised when a file's bytes cannot be sent."""
    kind = ErrorKind.UPLOAD
    category = ErrorCategory.SFTP_FILE_OPERATION


class PermissionModeError(TransferError):
    """Raised when the configured mode cannot be applied to a remote path."""
    kind = ErrorKind.PERMISSION
    category = ErrorCategory.SFTP_PERMISSION


class DirectoryTransferError(TransferError):
    """Raised after a directory list transfer in which some directories failed."""
    kind = ErrorKind.DIRECTORY
    category = ErrorCategory.SFTP_DIRECTORY

    def __init__(self, message: str, remote_path: Optional[str] = None,
                 local_path: Optional[str] = None,
                 failures: Optional[List[Tuple[str, TransferError]]] = None):
        super().__init__(message, remote_path=remote_path, local_path=local_path)
        self.failures = list(failures or [])

    @property
    def failed_directories(self) -> List[str]:
        return [name for name, _ in self.failures]


def is_missing(error: BaseException) -> bool:
    """True if a stat failure means "no such file" (SSH_FX_NO_SUCH_FILE)."""
    return isinstance(error, FileNotFoundError) or getattr(error, 'errno', None) == errno.ENOENT


def translate(error: BaseException, error_cls: Type[TransferError], message: str,
              remote_path: Optional[str] = None,
              local_path: Optional[str] = None,
              component: str = "",
              operation: str = "") -> TransferError:
    """Record a protocol failure and build the caller-facing error for it.

    Args:
        error: The low-level exception
        error_cls: TransferError subclass to build
        message: Human readable description naming the path(s) involved
        remote_path: Remote path the operation targeted
        local_path: Local path involved, if any
        component: Component name recorded with the error
        operation: Operation name recorded with the error

    Returns:
        The translated error; the caller raises it ``from error``
    """
    additional_data = {"remote_path": remote_path}
    if local_path is not None:
        additional_data["local_path"] = local_path
    handle_error(
        error=error,
        category=error_cls.category,
        severity=ErrorSeverity.HIGH,
        component=component,
        operation=operation,
        additional_data=additional_data
    )
    return error_cls(f"{message} - {error}", remote_path=remote_path, local_path=local_path)


@contextmanager
def translate_errors(error_cls: Type[TransferError], message: str,
                     remote_path: Optional[str] = None,
                     local_path: Optional[str] = None,
                     component: str = "",
                     operation: str = ""):
    """Re-raise protocol failures inside the block as ``error_cls``.

    Errors that are already TransferErrors pass through unchanged.
    """
    try:
        yield
    except TransferError:
        raise
    except PROTOCOL_ERRORS as e:
        raise translate(e, error_cls, message, remote_path=remote_path, local_path=local_path,
                        component=component, operation=operation) from e
