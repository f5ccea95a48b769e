"""Main entry point for the SFTP deployment tool."""

import sys
import logging
import os
from pathlib import Path

from .config.models import DeployConfig
from .config.settings import ConfigManager, ConfigurationError
from .sftp.errors import TransferError
from .sftp.orchestrator import TransferOrchestrator
from .sftp.request import SingleFileTransfer, DirectoryListTransfer, TransferRequest
from .sftp.session import SessionManager
from .utils.error_handler import get_error_handler, ErrorCategory, ErrorSeverity, handle_error
from .utils.logging_config import setup_logging as setup_advanced_logging


logger = logging.getLogger(__name__)


def setup_logging(config_manager: ConfigManager):
    """Set up console and file logging and the error handler."""
    logging_config = config_manager.get_logging_config()
    log_dir = Path(logging_config.log_dir)
    
    logging_manager = setup_advanced_logging(
        log_dir=str(log_dir),
        console_level=logging_config.console_level,
        file_level=logging_config.file_level,
        enable_colors=logging_config.enable_colors,
        verbose=config_manager.get_config_value("VERBOSE", False)
    )
    
    get_error_handler(str(log_dir / "error_context"))
    
    logger.debug(f"Python version: {sys.version}")
    logger.debug(f"Working directory: {os.getcwd()}")
    
    return logging_manager


def build_request(deploy_config: DeployConfig) -> TransferRequest:
    """
    Turn the configured local paths into a transfer request.
    
    A single regular file is sent to the remote path as-is; one or more
    directories have their contents uploaded below the remote path.
    
    Raises:
        ConfigurationError: If a path is missing or unreadable, or files and directories are mixed
    """
    paths = [Path(p) for p in deploy_config.local_paths]
    
    missing = [str(p) for p in paths if not p.exists()]
    if missing:
        raise ConfigurationError(f"Local path does not exist: {', '.join(missing)}")
    
    if len(paths) == 1 and paths[0].is_file():
        return SingleFileTransfer(paths[0], deploy_config.remote_path)
    
    not_dirs = [str(p) for p in paths if not p.is_dir()]
    if not_dirs:
        raise ConfigurationError(
            f"LOCAL_PATH must be a single file or a list of directories, got: {', '.join(not_dirs)}"
        )
    
    try:
        return DirectoryListTransfer.from_paths(paths, deploy_config.remote_path)
    except OSError as e:
        raise ConfigurationError(f"Could not read local directory: {e}") from e


def main() -> int:
    """Main application entry point."""
    logging_manager = None
    
    try:
        config_manager = ConfigManager()
        logging_manager = setup_logging(config_manager)
        
        deploy_config = config_manager.get_deploy_config()
        request = build_request(deploy_config)
        
        logger.info(f"Uploading {', '.join(deploy_config.local_paths)} to {deploy_config.remote_path}")
        
        session_manager = SessionManager(config_manager.get_retry_config())
        with session_manager.connect(config_manager.get_sftp_config()) as session:
            orchestrator = TransferOrchestrator(
                session,
                request,
                modes=deploy_config.modes,
                verbose=deploy_config.verbose
            )
            summary = orchestrator.execute()
        
        logging_manager.log_performance(
            "transfer",
            summary.elapsed,
            files=summary.files,
            directories=summary.directories,
            bytes=summary.bytes_sent
        )
        return 0
        
    except ConfigurationError as e:
        error_msg = f"Configuration error: {e}"
        if logging_manager:
            logger.critical(error_msg)
            handle_error(
                error=e,
                category=ErrorCategory.CONFIGURATION,
                severity=ErrorSeverity.CRITICAL,
                component="main",
                operation="startup"
            )
        else:
            print(error_msg, file=sys.stderr)
        return 1
    except TransferError as e:
        logger.error(f"Transfer failed: {e}")
        if e.__cause__ is not None:
            logger.debug(f"Underlying cause: {e.__cause__!r}")
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, aborting transfer")
        return 130
    except Exception as e:
        logger.critical(f"Unexpected error: {e}", exc_info=True)
        handle_error(
            error=e,
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.CRITICAL,
            component="main",
            operation="execution"
        )
        return 1
    finally:
        if logging_manager:
            error_report = get_error_handler().generate_error_report()
            if error_report:
                logger.info("Error Summary:")
                for line in error_report.splitlines():
                    logger.info(line)


if __name__ == "__main__":
    sys.exit(main())
