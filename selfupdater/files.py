"""File system operations used while installing an update."""

from __future__ import annotations

import json
import shutil
import zipfile
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Union

TEMP_FOLDER_NAME = "tempUpdate"

PathType = Union[str, "PathLike[str]"]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def json_is_valid(data: bytes | str) -> bool:
    """Tell whether ``data`` is a JSON object or array."""
    try:
        document = json.loads(data, parse_constant=_reject_constant)
    except ValueError:
        return False
    return isinstance(document, (dict, list))


def _sorted_entries(directory: Path) -> list[Path]:
    return sorted(directory.iterdir(), key=lambda entry: (entry.name.lower(), entry.name))


@dataclass
class FileManager:
    """File operations that collect copy failures in ``errors``."""

    errors: list[str] = field(default_factory=list)

    def read_file(self, path: PathType) -> bytes:
        """Return the file's contents, or empty bytes if it cannot be read."""
        try:
            return Path(path).read_bytes()
        except OSError:
            return b""

    def replace_or_create_file(self, path: PathType, data: bytes) -> None:
        """Write ``data`` to ``path``, removing any file already there."""
        target = Path(path)
        if target.exists():
            target.unlink()
        target.write_bytes(data)

    def create_folder(self, path: PathType) -> None:
        """Create the folder and its parents if it does not exist."""
        Path(path).mkdir(parents=True, exist_ok=True)

    def delete_recursively(self, path: PathType) -> bool:
        """Remove a folder tree unless copy errors were recorded.

        Returns False, leaving the folder in place, when errors exist or the
        removal fails.
        """
        if self.errors:
            return False
        folder = Path(path)
        if folder.is_dir():
            try:
                shutil.rmtree(folder)
            except OSError:
                self.errors.append(f"Error al eliminar la carpeta: {folder}")
                return False
        return True

    def extract_zip(self, zip_path: PathType, destination: PathType) -> None:
        """Extract an archive into ``destination``; raise OSError on failure."""
        try:
            with zipfile.ZipFile(zip_path) as archive:
                archive.extractall(destination)
        except zipfile.BadZipFile as exc:
            raise OSError(f"not a valid zip archive: {zip_path}") from exc

    def search_file(self, base_dir: PathType, found: PathType) -> bool:
        """Replace the first file under ``base_dir`` named like ``found``.

        The temporary update folder is skipped. Returns whether a match
        was found.
        """
        source = Path(found)
        for entry in _sorted_entries(Path(base_dir)):
            if entry.name == TEMP_FOLDER_NAME:
                continue
            if entry.is_dir():
                if self.search_file(entry, source):
                    return True
            elif entry.is_file() and entry.name == source.name:
                self.copy_file(source.resolve(), entry.resolve())
                return True
        return False

    def copy_file(self, source: PathType, target: PathType) -> None:
        """Copy ``source`` over ``target``, recording any failure in ``errors``."""
        target_path = Path(target)
        if target_path.exists():
            try:
                target_path.unlink()
            except OSError:
                self.errors.append(f"Error al eliminar el archivo: {target}")
                return
        try:
            shutil.copy(source, target_path)
        except OSError:
            self.errors.append(f"Error al copiar el archivo: {source}")

    def dir_entries(self, path: PathType) -> list[Path]:
        """List the entries of a folder by name, or nothing if it is missing."""
        folder = Path(path)
        if not folder.is_dir():
            return []
        return _sorted_entries(folder)