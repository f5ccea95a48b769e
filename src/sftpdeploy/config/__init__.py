# Configuration module

from .models import (
    SFTPConfig,
    DeployConfig,
    PermissionModes,
    LoggingConfig,
    ConnectionRetryConfig
)
from .settings import ConfigManager, ConfigurationError, parse_mode

__all__ = [
    'SFTPConfig',
    'DeployConfig',
    'PermissionModes',
    'LoggingConfig',
    'ConnectionRetryConfig',
    'ConfigManager',
    'ConfigurationError',
    'parse_mode'
]
