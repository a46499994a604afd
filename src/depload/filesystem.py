"""Minimal host file-system root abstraction.

Holds the root path and the ordered input path list that installed package
content is merged into. Paths are combined and collapsed lexically.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Union

PathLike = Union[str, "os.PathLike[str]"]


class FileSystem:
    """Root path plus the host's ordered input search paths."""

    def __init__(self, root_path: Optional[PathLike] = None, input_paths: Optional[List[Path]] = None) -> None:
        self.root_path = Path(os.path.abspath(root_path if root_path is not None else os.getcwd()))
        self.input_paths: List[Path] = list(input_paths or [])

    @staticmethod
    def collapse(path: PathLike) -> Path:
        """Normalize ``.`` and ``..`` segments without touching the disk."""
        return Path(os.path.normpath(path))

    def combine(self, *parts: PathLike) -> Path:
        """Join parts onto the root; an absolute part replaces the root."""
        return self.collapse(self.root_path.joinpath(*parts))
