"""Helpers for atomic JSON file operations."""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, List

from ..errors import PersistenceError, TaskFileParseError

FILE_MODE = 0o644


class Persistence:
    """Handles whole-file JSON reads and atomic rewrites."""

    @staticmethod
    def load_json_list(file_path: Path) -> List[Any]:
        """Load a JSON array from file, return [] if the file does not exist.

        Raises TaskFileParseError when the content is not valid JSON or the top
        level is not an array. Other read failures propagate as OSError.
        """
        if not file_path.exists():
            return []

        with file_path.open("r", encoding="utf-8") as fp:
            try:
                data = json.load(fp)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise TaskFileParseError(f"{file_path}: {exc}") from exc
        if not isinstance(data, list):
            raise TaskFileParseError(
                f"{file_path}: expected a JSON array, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def save_json(file_path: Path, data: Any, indent: int = 1) -> None:
        """Atomically save JSON to file."""
        try:
            Persistence.ensure_dir(file_path.parent)
            tmp_fd, tmp_path = tempfile.mkstemp(dir=file_path.parent, suffix=".tmp")
        except OSError as exc:
            raise PersistenceError(f"{file_path}: {exc}") from exc

        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as fp:
                json.dump(data, fp, indent=indent)
                fp.write("\n")
                fp.flush()
                os.fsync(fp.fileno())
            # mkstemp creates 0600; tasks files are plain user documents
            os.chmod(tmp_path, FILE_MODE)
            shutil.move(tmp_path, file_path)
        except OSError as exc:
            raise PersistenceError(f"{file_path}: {exc}") from exc
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    @staticmethod
    def ensure_dir(dir_path: Path) -> None:
        """Create directory if it doesn't exist."""
        dir_path.mkdir(parents=True, exist_ok=True)
