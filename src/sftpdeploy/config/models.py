"""Configuration data models for the SFTP deployment tool."""

from dataclasses import dataclass, field
from typing import List, Optional


MAX_PERMISSION_MODE = 0o7777


@dataclass
class SFTPConfig:
    """Configuration for the SFTP server connection."""
    host: str
    port: int
    username: str
    password: Optional[str] = None
    key_file: Optional[str] = None
    timeout: float = 30.0


@dataclass(frozen=True)
class PermissionModes:
    """Permission bits applied to every created directory and uploaded file."""
    dir_mode: int = 0o755
    file_mode: int = 0o644

    def __post_init__(self):
        for name in ("dir_mode", "file_mode"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_PERMISSION_MODE:
                raise ValueError(f"{name} must be between 0 and 0o7777, got {oct(value)}")


@dataclass
class DeployConfig:
    """What to upload and where to put it."""
    local_paths: List[str]
    remote_path: str
    modes: PermissionModes = field(default_factory=PermissionModes)
    verbose: bool = False


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    log_dir: str = "./logs"
    console_level: str = "INFO"
    file_level: str = "DEBUG"
    enable_colors: bool = True


@dataclass
class ConnectionRetryConfig:
    """Retry policy for establishing the SSH session.

    Only the session handshake is retried; remote file operations never are.
    """
    max_retries: int = 3
    retry_delay: float = 1.0
