"""Remote directory handling: idempotent creation and the working directory stack."""

import logging
import posixpath
from contextlib import contextmanager
from typing import List, Optional

from paramiko import SFTPClient

from .errors import (
    PROTOCOL_ERRORS, RemoteDirectoryError, PermissionModeError,
    is_missing, translate, translate_errors
)


logger = logging.getLogger(__name__)


class RemoteDirectoryEnsurer:
    """Makes sure a remote directory exists, creating it with the directory mode if not."""
    
    def __init__(self, dir_mode: int):
        """
        Initialize the ensurer.
        
        Args:
            dir_mode: Permission bits applied to every directory this creates
        """
        self.dir_mode = dir_mode
    
    def ensure(self, channel: SFTPClient, remote_path: str,
               display_path: Optional[str] = None) -> bool:
        """
        Ensure ``remote_path`` exists on the server.
        
        A "no such file" stat failure is expected and triggers creation;
        any other stat failure is fatal.
        
        Args:
            channel: Open SFTP channel
            remote_path: Path as passed to the server, absolute or relative to the channel's cwd
            display_path: Full path used in log lines and errors, defaults to ``remote_path``
            
        Returns:
            True if the directory was created, False if it already existed
            
        Raises:
            RemoteDirectoryError: If the path cannot be inspected or created
            PermissionModeError: If the directory mode cannot be applied
        """
        display_path = display_path or remote_path
        
        try:
            channel.stat(remote_path)
            logger.debug(f"Remote directory exists: {display_path}")
            return False
        except PROTOCOL_ERRORS as e:
            if not is_missing(e):
                raise translate(
                    e, RemoteDirectoryError,
                    f"failed to access remote dir '{display_path}'",
                    remote_path=display_path,
                    component="RemoteDirectoryEnsurer",
                    operation="stat"
                ) from e
        
        with translate_errors(RemoteDirectoryError,
                              f"Could not create remote dir '{display_path}'",
                              remote_path=display_path,
                              component="RemoteDirectoryEnsurer",
                              operation="mkdir"):
            channel.mkdir(remote_path)
        
        with translate_errors(PermissionModeError,
                              f"Could not set mode {oct(self.dir_mode)} on '{display_path}'",
                              remote_path=display_path,
                              component="RemoteDirectoryEnsurer",
                              operation="chmod"):
            channel.chmod(remote_path, self.dir_mode)
        
        logger.info(f"Created remote directory: {display_path}")
        return True


class RemoteWorkingDirectory:
    """Explicit stack of directories entered below a remote base path.

    ``enter`` changes into a child directory and always changes back out
    with ``..`` when the block exits, so ``depth`` returns to what it was
    and siblings are addressed from the same place.
    """
    
    def __init__(self, channel: SFTPClient, base: str):
        self._channel = channel
        self.base = base
        self._stack: List[str] = []
    
    @property
    def depth(self) -> int:
        return len(self._stack)
    
    @property
    def current(self) -> str:
        return posixpath.join(self.base, *self._stack)
    
    def path_of(self, name: str) -> str:
        return posixpath.join(self.current, name)
    
    def change_to_base(self) -> None:
        """Make the base path the channel's working directory.

        The base is then pinned to the server's absolute form of the path so
        the channel can be re-anchored from anywhere.
        """
        with translate_errors(RemoteDirectoryError,
                              f"Could not CD to '{self.base}'",
                              remote_path=self.base,
                              component="RemoteWorkingDirectory",
                              operation="cd"):
            self._channel.chdir(self.base)
            self.base = self._channel.getcwd() or self.base
        self._stack.clear()
    
    @contextmanager
    def enter(self, name: str):
        """Change into ``name`` for the duration of the block."""
        target = self.path_of(name)
        with translate_errors(RemoteDirectoryError,
                              f"Could not CD to '{target}'",
                              remote_path=target,
                              component="RemoteWorkingDirectory",
                              operation="cd"):
            self._channel.chdir(name)
        self._stack.append(name)
        
        try:
            yield target
        except BaseException:
            # the failure in flight wins over a failure to step back out
            self._leave(quiet=True)
            raise
        self._leave()
    
    def _leave(self, quiet: bool = False) -> None:
        """Pop one level, with ``..`` or, failing that, an absolute cd to the parent."""
        left = self.current
        self._stack.pop()
        try:
            self._channel.chdir("..")
            return
        except PROTOCOL_ERRORS as e:
            step_error = e
        
        try:
            self._channel.chdir(self.current)
        except PROTOCOL_ERRORS:
            pass
        else:
            logger.warning(f"Could not CD out of '{left}' with '..' ({step_error}), "
                           f"returned to '{self.current}'")
            return
        
        error = translate(step_error, RemoteDirectoryError,
                          f"Could not CD out of '{left}'",
                          remote_path=left,
                          component="RemoteWorkingDirectory",
                          operation="cd")
        if not quiet:
            raise error from step_error
        logger.warning(str(error))
