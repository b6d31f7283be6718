"""The update procedure and the command that runs it."""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Callable
from os import PathLike
from pathlib import Path
from typing import Union

from .config import CONFIG_FILE_NAME, ConfigError, MainAppInfo, load_config, write_local_version
from .countdown import QuitCountdown
from .files import TEMP_FOLDER_NAME, FileManager
from .server import ServerError, ServerManager

PathType = Union[str, "PathLike[str]"]

NO_UPDATES = "No hay actualizaciones disponibles!"
INSTALLED = "Instalación finalizada correctamente!"


class UpdateError(Exception):
    """The update could not be completed; the message says why."""


def _ignore(_message: str) -> None:
    return None


def _format_number(value: float) -> str:
    return f"{value:g}"


class Updater:
    """Checks the server for a newer release and installs it into ``app_dir``.

    ``report`` receives the progress messages meant for the user. When no
    ``server`` is given, one is built from the configuration file.
    """

    def __init__(
        self,
        app_dir: PathType,
        server: ServerManager | None = None,
        files: FileManager | None = None,
        report: Callable[[str], None] | None = None,
    ) -> None:
        self.app_dir = Path(app_dir)
        self.server = server
        self.files = files if files is not None else FileManager()
        self.report = report if report is not None else _ignore
        self.main_app = MainAppInfo()
        self.cancelled = False
        self._cancellable = True

    @property
    def config_path(self) -> Path:
        return self.app_dir / CONFIG_FILE_NAME

    @property
    def temp_folder(self) -> Path:
        return self.app_dir / TEMP_FOLDER_NAME

    def _log(self, message: str) -> None:
        """Send a log line to the server; a failure to log is not fatal."""
        if self.server is None:
            return
        try:
            self.server.send_log(message)
        except ServerError:
            pass

    def _finish(self, text: str) -> str:
        self._log("LOG:" + text)
        return text

    def run(self) -> str | None:
        """Run the whole update.

        Returns the final message, or None when the update was cancelled.
        Raises UpdateError when it fails.
        """
        try:
            config = load_config(self.config_path)
        except ConfigError as exc:
            raise UpdateError(str(exc)) from exc
        self.main_app = config.main_app
        if self.server is None:
            self.server = ServerManager(config.server)

        self.report("Obteniendo última versión...")
        if self.cancelled:
            return None
        try:
            latest = self.server.get_latest_version()
        except ServerError as exc:
            if exc.cancelled:
                return None
            self._cancellable = False
            raise UpdateError(str(exc)) from exc

        if not latest > self.main_app.version:
            self._cancellable = False
            return self._finish(NO_UPDATES)

        self._log("LOG: Iniciando descarga de la version: " + _format_number(latest))
        self.report("Descargando nueva versión...")
        self.main_app.version = latest

        if self.cancelled:
            return None
        self._cancellable = False
        try:
            file_name, data = self.server.download_new_version()
        except ServerError as exc:
            if exc.cancelled:
                return None
            raise UpdateError(str(exc)) from exc

        self.install(file_name, data)
        return self._finish(INSTALLED)

    def install(self, file_name: str, data: bytes) -> None:
        """Install a downloaded release according to its file type."""
        self._log("LOG: Descarga finalizada correctamente. Instalando...")
        self.report("Descarga finalizada. Instalando...")
        if file_name.endswith(".exe"):
            self.install_exe(file_name, data)
        elif file_name.endswith(".zip"):
            self.install_zip(file_name, data)
        else:
            self._log("LOG: Archivo enviado no valido!")
            raise UpdateError("Archivo recibido del servidor no valido!")

    def install_exe(self, file_name: str, data: bytes) -> None:
        """Write an executable next to the updater and record the new version."""
        try:
            self.files.replace_or_create_file(self.app_dir / file_name, data)
        except OSError as exc:
            message = "Error al crear o copiar el archivo: " + file_name
            self._log("LOG: " + message)
            raise UpdateError(message) from exc
        self.update_local_version()

    def install_zip(self, file_name: str, data: bytes) -> None:
        """Unpack an archive and put each file where it belongs."""
        zip_path = self.temp_folder / file_name
        try:
            self.files.create_folder(self.temp_folder)
            self.files.replace_or_create_file(zip_path, data)
        except OSError as exc:
            message = "\n".join(self.files.errors) or str(exc)
            self._log(message)
            raise UpdateError(message) from exc

        try:
            self.files.extract_zip(zip_path, self.temp_folder)
        except OSError as exc:
            raise UpdateError(
                "Hubo un error al descomprimir el archivo de actualización!"
            ) from exc

        for entry in self.files.dir_entries(self.temp_folder):
            if entry.name.endswith("zip"):
                continue
            if not self.files.search_file(self.app_dir, entry):
                self.files.copy_file(entry.resolve(), self.app_dir / entry.name)

        if not self.files.delete_recursively(self.temp_folder):
            message = "Error al instalar los siguientes archivos:\n" + "\n".join(self.files.errors)
            self._log("LOG:" + message)
            raise UpdateError(message)

        self.update_local_version()

    def update_local_version(self) -> None:
        """Store the installed version in the configuration file."""
        try:
            write_local_version(self.config_path, self.main_app.version)
        except ConfigError as exc:
            self._log("No se pudo actualizar la version local!")
            raise UpdateError(str(exc)) from exc

    def cancel(self) -> bool:
        """Ask the update to stop; returns False once it can no longer be cancelled."""
        if not self._cancellable:
            return False
        self.cancelled = True
        self._cancellable = False
        self.report("Cancelando...")
        if self.server is not None:
            self.server.cancel_requests()
        return True


def main(argv: list[str] | None = None) -> int:
    """Run the updater from the command line."""
    parser = argparse.ArgumentParser(description="Update an application from its server.")
    parser.add_argument(
        "--app-dir",
        default=".",
        help="folder holding the application and " + CONFIG_FILE_NAME,
    )
    parser.add_argument(
        "--countdown",
        type=int,
        default=5,
        help="seconds to count down before closing",
    )
    args = parser.parse_args(argv)
    if args.countdown < 0:
        parser.error("--countdown must not be negative")

    updater = Updater(args.app_dir, report=print)
    status = 0
    try:
        result = updater.run()
    except UpdateError as exc:
        print("Error en la actualización", file=sys.stderr)
        print(str(exc), file=sys.stderr)
        status = 1
    else:
        if result is not None:
            print(result)

    countdown = QuitCountdown(args.countdown)
    for index, message in enumerate(countdown):
        if index:
            time.sleep(countdown.interval)
        print(message)
    return status


if __name__ == "__main__":
    sys.exit(main())