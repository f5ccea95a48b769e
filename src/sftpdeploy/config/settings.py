"""Configuration manager for the SFTP deployment tool."""

import os
from typing import Dict, Any
from dotenv import load_dotenv

from .models import (
    SFTPConfig, DeployConfig, PermissionModes,
    LoggingConfig, ConnectionRetryConfig
)


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""
    pass


def parse_mode(value: str, name: str) -> int:
    """Parse an octal permission string such as ``755`` or ``0o644``.

    Args:
        value: Raw value from the environment
        name: Variable name, used in the error message

    Returns:
        Permission bits as an integer

    Raises:
        ConfigurationError: If the value is not a valid octal mode
    """
    text = value.strip().lower()
    if text.startswith('0o'):
        text = text[2:]
    try:
        mode = int(text, 8)
    except ValueError:
        raise ConfigurationError(f"{name} must be an octal permission mode, got '{value}'")
    if not 0 <= mode <= 0o7777:
        raise ConfigurationError(f"{name} must be between 0 and 7777, got '{value}'")
    return mode


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class ConfigManager:
    """Manages configuration loading and validation for the application."""
    
    def __init__(self, load_env_file: bool = True):
        """Initialize the configuration manager.
        
        Args:
            load_env_file: Whether to read a ``.env`` file before the environment
        """
        if load_env_file:
            load_dotenv()
        self._config = self._load_config()
        self._validate_required_config()
    
    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        try:
            return {
                # Destination SFTP Configuration
                'SFTP_HOST': os.getenv('SFTP_HOST'),
                'SFTP_PORT': int(os.getenv('SFTP_PORT', '22')),
                'SFTP_USERNAME': os.getenv('SFTP_USERNAME'),
                'SFTP_PASSWORD': os.getenv('SFTP_PASSWORD'),
                'SFTP_KEY_FILE': os.getenv('SFTP_KEY_FILE'),
                'SFTP_TIMEOUT': float(os.getenv('SFTP_TIMEOUT', '30')),
                'SFTP_REMOTE_PATH': os.getenv('SFTP_REMOTE_PATH'),
                
                # Transfer Configuration
                'LOCAL_PATH': os.getenv('LOCAL_PATH'),
                'DIR_MODE': parse_mode(os.getenv('DIR_MODE', '755'), 'DIR_MODE'),
                'FILE_MODE': parse_mode(os.getenv('FILE_MODE', '644'), 'FILE_MODE'),
                'VERBOSE': _parse_bool(os.getenv('VERBOSE', 'false')),
                
                # Connection retry Configuration
                'CONNECT_RETRIES': int(os.getenv('CONNECT_RETRIES', '3')),
                'CONNECT_RETRY_DELAY': float(os.getenv('CONNECT_RETRY_DELAY', '1.0')),
                
                # Logging Configuration
                'LOG_DIR': os.getenv('LOG_DIR', './logs'),
                'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
            }
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric configuration value: {e}")
    
    def _validate_required_config(self) -> None:
        """Validate that all required configuration is present."""
        required_fields = [
            'SFTP_HOST',
            'SFTP_USERNAME',
            'SFTP_REMOTE_PATH',
            'LOCAL_PATH'
        ]
        
        missing_fields = []
        for field in required_fields:
            if not self._config.get(field):
                missing_fields.append(field)
        
        if missing_fields:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing_fields)}"
            )
        
        if not (self._config['SFTP_PASSWORD'] or self._config['SFTP_KEY_FILE']):
            raise ConfigurationError("One of SFTP_PASSWORD or SFTP_KEY_FILE must be set")
        
        # Validate port numbers
        if not (1 <= self._config['SFTP_PORT'] <= 65535):
            raise ConfigurationError("SFTP_PORT must be between 1 and 65535")
        
        if self._config['CONNECT_RETRIES'] < 1:
            raise ConfigurationError("CONNECT_RETRIES must be at least 1")
    
    def get_sftp_config(self) -> SFTPConfig:
        """Get destination SFTP server configuration."""
        return SFTPConfig(
            host=self._config['SFTP_HOST'],
            port=self._config['SFTP_PORT'],
            username=self._config['SFTP_USERNAME'],
            password=self._config['SFTP_PASSWORD'],
            key_file=self._config['SFTP_KEY_FILE'],
            timeout=self._config['SFTP_TIMEOUT']
        )
    
    def get_deploy_config(self) -> DeployConfig:
        """Get the transfer configuration."""
        # LOCAL_PATH may list several directories separated by commas
        local_paths = [p.strip() for p in self._config['LOCAL_PATH'].split(',') if p.strip()]
        
        return DeployConfig(
            local_paths=local_paths,
            remote_path=self._config['SFTP_REMOTE_PATH'],
            modes=PermissionModes(
                dir_mode=self._config['DIR_MODE'],
                file_mode=self._config['FILE_MODE']
            ),
            verbose=self._config['VERBOSE']
        )
    
    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return LoggingConfig(
            log_dir=self._config['LOG_DIR'],
            console_level=self._config['LOG_LEVEL'],
        )
    
    def get_retry_config(self) -> ConnectionRetryConfig:
        """Get the session connection retry policy."""
        return ConnectionRetryConfig(
            max_retries=self._config['CONNECT_RETRIES'],
            retry_delay=self._config['CONNECT_RETRY_DELAY']
        )
    
    def get_config_value(self, key: str, default: Any = None) -> Any:
        """Get a specific configuration value."""
        return self._config.get(key, default)
