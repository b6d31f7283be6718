"""Reading and updating the updater's JSON configuration file."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Union

CONFIG_FILE_NAME = "updater-config.json"

_DOUBLE_RE = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*")

PathType = Union[str, "PathLike[str]"]


class ConfigError(Exception):
    """Raised when the configuration cannot be read or written."""


@dataclass
class MainAppInfo:
    """The application that the updater keeps up to date."""

    file_name: str = ""
    version: float = 0.0


@dataclass
class ServerInfo:
    """Where the update server lives and which routes it offers."""

    host_name: str = ""
    latest_version_route: str = ""
    download_version_route: str = ""
    send_log_route: str = ""


@dataclass
class UpdaterConfig:
    """The whole contents of the configuration file."""

    main_app: MainAppInfo = field(default_factory=MainAppInfo)
    server: ServerInfo = field(default_factory=ServerInfo)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant: {name}")


def _load_json(data: bytes | str) -> Any:
    return json.loads(data, parse_constant=_reject_constant)


def _as_object(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _to_double(text: str) -> float:
    """Convert text to a number, giving 0.0 when it is not one."""
    return float(text) if _DOUBLE_RE.fullmatch(text) else 0.0


def _format_version(version: float) -> str:
    return f"{version:g}"


def parse_config(data: bytes | str) -> UpdaterConfig:
    """Parse the bytes of a configuration file."""
    if not data:
        raise ConfigError("Error al leer el archivo de configuracion!")
    try:
        document = _load_json(data)
    except ValueError as exc:
        raise ConfigError("Error al leer el archivo de configuracion!") from exc
    if not isinstance(document, (dict, list)):
        raise ConfigError("Error al leer el archivo de configuracion!")

    root = _as_object(document)
    app = _as_object(root.get("mainAppInfo"))
    server = _as_object(root.get("serverInfo"))

    return UpdaterConfig(
        main_app=MainAppInfo(
            file_name=_as_string(app.get("fileName")),
            version=_to_double(_as_string(app.get("version"))),
        ),
        server=ServerInfo(
            host_name=_as_string(server.get("hostName")),
            latest_version_route=_as_string(server.get("getLatestVersionRoute")),
            download_version_route=_as_string(server.get("downloadVersionRoute")),
            send_log_route=_as_string(server.get("sendLogRoute")),
        ),
    )


def load_config(path: PathType) -> UpdaterConfig:
    """Read and parse the configuration file at ``path``."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise ConfigError("Error al leer el archivo de configuracion!") from exc
    return parse_config(data)


def write_local_version(path: PathType, version: float) -> None:
    """Store ``version`` as the installed version in the configuration file."""
    config_path = Path(path)
    failure = "Error al actualizar la version local. Nueva version: " + _format_version(version)
    try:
        data = config_path.read_bytes()
    except OSError as exc:
        raise ConfigError(failure) from exc
    if not data:
        raise ConfigError(failure)

    try:
        root = _as_object(_load_json(data))
    except ValueError:
        root = {}

    app = dict(_as_object(root.get("mainAppInfo")))
    app["version"] = _format_version(version)
    root["mainAppInfo"] = app

    text = json.dumps(root, indent=4, sort_keys=True, ensure_ascii=False) + "\n"
    try:
        config_path.write_bytes(text.encode("utf-8"))
    except OSError as exc:
        raise ConfigError(failure) from exc