"""In-memory description of a local directory tree."""

import logging
import os
from pathlib import Path
from typing import Iterator, List, Optional, Union


logger = logging.getLogger(__name__)


class LocalDirectory:
    """One local directory: the files and subdirectories it contributes.

    The tree is owned by the caller and only read during a transfer. Both
    iterators can be requested any number of times.
    """
    
    def __init__(self, path: Union[str, Path],
                 files: Optional[List[Union[str, Path]]] = None,
                 directories: Optional[List['LocalDirectory']] = None):
        self.path = Path(path)
        self._files = [Path(f) for f in (files or [])]
        self._directories = list(directories or [])
    
    @property
    def name(self) -> str:
        return self.path.name
    
    def add_file(self, file: Union[str, Path]) -> None:
        self._files.append(Path(file))
    
    def add_directory(self, directory: 'LocalDirectory') -> None:
        self._directories.append(directory)
    
    def iter_files(self) -> Iterator[Path]:
        return iter(list(self._files))
    
    def iter_directories(self) -> Iterator['LocalDirectory']:
        return iter(list(self._directories))
    
    def __repr__(self):
        return f"LocalDirectory({str(self.path)!r})"
    
    def __str__(self):
        return str(self.path)
    
    @classmethod
    def scan(cls, path: Union[str, Path]) -> 'LocalDirectory':
        """Build a tree from the filesystem, with entries sorted by name.
        
        Args:
            path: Local directory to describe
            
        Returns:
            LocalDirectory rooted at ``path``
            
        Raises:
            NotADirectoryError: If ``path`` is not a directory
        """
        root = Path(path)
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")
        
        node = cls(root)
        with os.scandir(root) as entries:
            for entry in sorted(entries, key=lambda e: e.name):
                # symlinked directories are not followed
                if entry.is_dir(follow_symlinks=False):
                    node.add_directory(cls.scan(entry.path))
                elif entry.is_file():
                    node.add_file(entry.path)
                else:
                    logger.debug(f"Skipping {entry.path}: not a regular file or directory")
        return node
