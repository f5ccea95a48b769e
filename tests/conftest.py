"""Shared fixtures for transfer tests."""

import logging
import posixpath
import stat
from unittest.mock import MagicMock

import pytest

from sftpdeploy.utils import error_handler


class FakeSFTPChannel:
    """Records calls like ``paramiko.SFTPClient`` and keeps a remote cwd.

    ``existing`` holds absolute remote directories that already exist.
    ``failures`` maps (operation, path) to the exception to raise. The path
    is matched as passed (e.g. ``("cd", "..")``) or resolved to an absolute
    path. A list value is consumed one entry per call, ``None`` meaning the
    call succeeds.
    """

    def __init__(self, cwd="/home/deploy", existing=None, failures=None):
        self.cwd = cwd
        self.existing = set(existing or [])
        self.existing.add(cwd)
        self.failures = dict(failures or {})
        self.calls = []
        self.callbacks = []
        self.closed = False

    def _resolve(self, path):
        return posixpath.normpath(posixpath.join(self.cwd, path))

    def _maybe_fail(self, op, path):
        key = (op, path) if (op, path) in self.failures else (op, self._resolve(path))
        error = self.failures.get(key)
        if isinstance(error, list):
            error = error.pop(0) if error else None
        if error is not None:
            raise error

    def getcwd(self):
        return self.cwd

    def stat(self, path):
        self.calls.append(("stat", path))
        self._maybe_fail("stat", path)
        if self._resolve(path) not in self.existing:
            raise FileNotFoundError(2, "No such file")
        return MagicMock(st_size=0, st_mode=stat.S_IFDIR | 0o755)

    def mkdir(self, path, mode=511):
        self.calls.append(("mkdir", path))
        self._maybe_fail("mkdir", path)
        self.existing.add(self._resolve(path))

    def chmod(self, path, mode):
        self.calls.append(("chmod", path, mode))
        self._maybe_fail("chmod", path)

    def chdir(self, path=None):
        self.calls.append(("cd", path))
        self._maybe_fail("cd", path)
        target = self._resolve(path)
        if target not in self.existing:
            raise FileNotFoundError(2, "No such file")
        self.cwd = target

    def put(self, localpath, remotepath, callback=None, confirm=True):
        self.calls.append(("put", remotepath))
        self._maybe_fail("put", remotepath)
        self.callbacks.append(callback)
        if callback is not None:
            with open(localpath, 'rb') as f:
                total = len(f.read())
            sent = 0
            while sent < total:
                sent = min(sent + 32768, total)
                callback(sent, total)

    def close(self):
        self.closed = True

    def ops(self, *names):
        return [c for c in self.calls if c[0] in names]


@pytest.fixture
def channel():
    return FakeSFTPChannel()


@pytest.fixture
def session(channel):
    session = MagicMock()
    session.open_sftp.return_value = channel
    return session


@pytest.fixture(autouse=True)
def fresh_error_handler():
    error_handler.reset_error_handler()
    yield
    error_handler.reset_error_handler()


def make_file(path, size):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in saved_handlers:
        root.addHandler(handler)
    root.setLevel(saved_level)
    for name in ('performance', 'sftpdeploy.sftp'):
        named = logging.getLogger(name)
        for handler in named.handlers[:]:
            named.removeHandler(handler)
            handler.close()
