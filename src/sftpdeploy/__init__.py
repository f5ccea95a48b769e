"""Upload local files and directory trees to a remote host over SFTP."""

__version__ = "0.1.0"
