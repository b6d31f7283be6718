"""Talking to the update server."""

from __future__ import annotations

import json
import re
import threading
from collections.abc import Iterator
from contextlib import contextmanager

import requests

from .config import ServerInfo

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')
_DOUBLE_RE = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\s*")
_CANCELLED = "Operation canceled"
_CHUNK_SIZE = 64 * 1024


class ServerError(Exception):
    """A request to the server failed; ``cancelled`` marks an aborted one."""

    def __init__(self, message: str, *, cancelled: bool = False) -> None:
        super().__init__(message)
        self.cancelled = cancelled


def parse_latest_version(body: bytes | str) -> float:
    """Extract the version number from the server's JSON answer."""
    try:
        document = json.loads(body)
    except ValueError:
        document = None
    if not isinstance(document, dict):
        raise ServerError(
            "Error al obtener la última version. Respuesta del servidor mal formateada!"
        )
    text = document.get("data")
    if not isinstance(text, str) or not _DOUBLE_RE.fullmatch(text):
        raise ServerError("Versión obtenida del servidor no válida!")
    return float(text)


def parse_content_disposition(header: str | None) -> str:
    """Return the file name given in a Content-Disposition header."""
    if header is None:
        raise ServerError("Error en la respuesta. Header invalido!")
    if not header:
        raise ServerError("Error en la respuesta. Header valido pero sin contenido!")
    match = _FILENAME_RE.search(header)
    if match is None:
        raise ServerError("Error en la respuesta. No se encontró el nombre del archivo")
    return match.group(1)


class ServerManager:
    """Requests versions and downloads from the server and sends it logs."""

    def __init__(self, info: ServerInfo, session: requests.Session | None = None) -> None:
        self.info = info
        self.session = session if session is not None else requests.Session()
        self._lock = threading.Lock()
        self._running: set[threading.Event] = set()

    @contextmanager
    def _track(self) -> Iterator[threading.Event]:
        token = threading.Event()
        with self._lock:
            self._running.add(token)
        try:
            yield token
        except requests.RequestException as exc:
            if token.is_set():
                raise ServerError(_CANCELLED, cancelled=True) from exc
            raise ServerError(str(exc)) from exc
        finally:
            with self._lock:
                self._running.discard(token)

    @staticmethod
    def _check(token: threading.Event) -> None:
        if token.is_set():
            raise ServerError(_CANCELLED, cancelled=True)

    def _fetch(self, method: str, route: str, **kwargs) -> tuple[dict, bytes]:
        with self._track() as token:
            response = self.session.request(
                method, self.info.host_name + route, stream=True, **kwargs
            )
            with response:
                self._check(token)
                response.raise_for_status()
                chunks = []
                for chunk in response.iter_content(_CHUNK_SIZE):
                    self._check(token)
                    chunks.append(chunk)
                self._check(token)
                return response.headers, b"".join(chunks)

    def get_latest_version(self) -> float:
        """Ask the server for the newest available version."""
        _, body = self._fetch("GET", self.info.latest_version_route)
        return parse_latest_version(body)

    def download_new_version(self) -> tuple[str, bytes]:
        """Download the newest release; return its file name and contents."""
        headers, body = self._fetch("GET", self.info.download_version_route)
        return parse_content_disposition(headers.get("Content-Disposition")), body

    def send_log(self, message: str) -> None:
        """Post a log message to the server."""
        payload = json.dumps({"message": message}, indent=4, ensure_ascii=False) + "\n"
        self._fetch(
            "POST",
            self.info.send_log_route,
            data=payload.encode("utf-8"),
            headers={"Content-Type": "application/json"},
        )

    def cancel_requests(self) -> bool:
        """Abort the requests in flight.

        Returns True when none were running, so the caller may quit at once;
        otherwise each aborted request raises a cancelled ServerError.
        """
        with self._lock:
            for token in self._running:
                token.set()
            return not self._running