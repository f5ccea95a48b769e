"""SSH session management for deployments."""

import time
import logging
from contextlib import contextmanager
from typing import Optional

import paramiko
from paramiko import SSHClient

from ..config.models import SFTPConfig, ConnectionRetryConfig
from ..utils.error_handler import handle_error, ErrorCategory, ErrorSeverity
from .errors import TransferConnectionError


logger = logging.getLogger(__name__)


class SessionManager:
    """Opens authenticated SSH sessions with retry logic.

    Only establishing the session is retried. Once connected, transfers
    over the session fail fast.
    """
    
    def __init__(self, retry_config: Optional[ConnectionRetryConfig] = None,
                 client_factory=SSHClient):
        """
        Initialize the session manager.
        
        Args:
            retry_config: Number of connection attempts and delay between them
            client_factory: Callable returning a new ``SSHClient``
        """
        self.retry_config = retry_config or ConnectionRetryConfig()
        self.client_factory = client_factory
        self._ssh_client: Optional[SSHClient] = None
    
    @contextmanager
    def connect(self, config: SFTPConfig):
        """
        Context manager for SSH sessions with automatic cleanup.
        
        Args:
            config: SFTP configuration
            
        Yields:
            SSHClient: Connected client, ready to open an SFTP channel
            
        Raises:
            TransferConnectionError: If connection fails after all retries
        """
        client = None
        try:
            client = self._establish_connection(config)
            yield client
        finally:
            if client:
                self._close_connection()
    
    def _establish_connection(self, config: SFTPConfig) -> SSHClient:
        """
        Establish the SSH session with retry logic.
        
        Args:
            config: SFTP configuration
            
        Returns:
            SSHClient: Connected client
            
        Raises:
            TransferConnectionError: If connection fails after all retries
        """
        max_retries = self.retry_config.max_retries
        last_error = None
        
        for attempt in range(max_retries):
            try:
                logger.info(f"Attempting SSH connection to {config.host}:{config.port} (attempt {attempt + 1}/{max_retries})")
                
                self._ssh_client = self.client_factory()
                self._ssh_client.load_system_host_keys()
                self._ssh_client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
                
                self._ssh_client.connect(
                    hostname=config.host,
                    port=config.port,
                    username=config.username,
                    password=config.password,
                    key_filename=config.key_file,
                    timeout=config.timeout,
                    banner_timeout=config.timeout,
                    auth_timeout=config.timeout
                )
                
                logger.info(f"Successfully connected to SSH server {config.host}:{config.port}")
                return self._ssh_client
                
            except (paramiko.SSHException, OSError) as e:
                last_error = e
                
                severity = ErrorSeverity.HIGH if attempt == max_retries - 1 else ErrorSeverity.MEDIUM
                handle_error(
                    error=e,
                    category=ErrorCategory.SFTP_CONNECTION,
                    severity=severity,
                    component="SessionManager",
                    operation="establish_connection",
                    additional_data={
                        "host": config.host,
                        "port": config.port,
                        "username": config.username,
                        "attempt": attempt + 1,
                        "max_retries": max_retries
                    }
                )
                
                self._close_connection()
                
                if attempt < max_retries - 1:
                    logger.info(f"Retrying in {self.retry_config.retry_delay} seconds...")
                    time.sleep(self.retry_config.retry_delay)
        
        error_msg = f"Failed to connect to SSH server {config.host}:{config.port} after {max_retries} attempts"
        if last_error:
            error_msg += f". Last error: {last_error}"
        
        logger.error(error_msg)
        raise TransferConnectionError(error_msg) from last_error
    
    def _close_connection(self):
        """Close the SSH session."""
        if self._ssh_client:
            try:
                self._ssh_client.close()
            except (paramiko.SSHException, OSError) as e:
                logger.warning(f"Error closing SSH client: {e}")
            finally:
                self._ssh_client = None
