import json

import pytest
import requests
import responses

from selfupdater.config import ServerInfo
from selfupdater.server import (
    ServerError,
    ServerManager,
    parse_content_disposition,
    parse_latest_version,
)

HOST = "http://updates.example.com"
INFO = ServerInfo(HOST, "/latest", "/download", "/log")


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


@pytest.fixture
def manager():
    return ServerManager(INFO, requests.Session())


def test_parse_latest_version_reads_data():
    assert parse_latest_version(b'{"data": "1.5"}') == 1.5


@pytest.mark.parametrize("body", [b"[1]", b"garbage", b""])
def test_parse_latest_version_rejects_non_object(body):
    with pytest.raises(ServerError, match="mal formateada"):
        parse_latest_version(body)


@pytest.mark.parametrize("body", [b'{"data": "abc"}', b'{"data": 2}', b"{}"])
def test_parse_latest_version_rejects_bad_version(body):
    with pytest.raises(ServerError, match="no válida"):
        parse_latest_version(body)


@pytest.mark.parametrize(
    "header, name",
    [
        ('attachment; filename="update.zip"', "update.zip"),
        ("attachment; filename=app.exe; size=10", "app.exe"),
    ],
)
def test_parse_content_disposition(header, name):
    assert parse_content_disposition(header) == name


@pytest.mark.parametrize(
    "header, fragment",
    [(None, "Header invalido"), ("", "sin contenido"), ("attachment", "nombre del archivo")],
)
def test_parse_content_disposition_errors(header, fragment):
    with pytest.raises(ServerError, match=fragment):
        parse_content_disposition(header)


def test_get_latest_version(rsps, manager):
    rsps.add(responses.GET, HOST + "/latest", json={"data": "2.25"})
    assert manager.get_latest_version() == 2.25


def test_http_error_raises_server_error(rsps, manager):
    rsps.add(responses.GET, HOST + "/latest", status=500)
    with pytest.raises(ServerError) as info:
        manager.get_latest_version()
    assert info.value.cancelled is False


def test_connection_error_raises_server_error(rsps, manager):
    with pytest.raises(ServerError) as info:
        manager.get_latest_version()
    assert info.value.cancelled is False


def test_download_new_version(rsps, manager):
    rsps.add(
        responses.GET,
        HOST + "/download",
        body=b"PK\x03\x04content",
        headers={"Content-Disposition": 'attachment; filename="update.zip"'},
    )
    assert manager.download_new_version() == ("update.zip", b"PK\x03\x04content")


def test_download_without_header(rsps, manager):
    rsps.add(responses.GET, HOST + "/download", body=b"data")
    with pytest.raises(ServerError, match="Header invalido"):
        manager.download_new_version()


def test_send_log_posts_json(rsps, manager):
    rsps.add(responses.POST, HOST + "/log", status=200)
    manager.send_log("LOG: instalación")
    assert len(rsps.calls) == 1
    request = rsps.calls[0].request
    assert json.loads(request.body) == {"message": "LOG: instalación"}
    assert request.headers["Content-Type"] == "application/json"
    # The finished log request no longer counts as running.
    assert manager.cancel_requests() is True


def test_cancel_when_idle_is_ready_to_quit(rsps, manager):
    assert manager.cancel_requests() is True
    rsps.add(responses.GET, HOST + "/latest", json={"data": "3"})
    assert manager.get_latest_version() == 3.0


def test_cancel_during_request(rsps, manager):
    seen = []

    def respond(request):
        seen.append(manager.cancel_requests())
        return 200, {}, json.dumps({"data": "4"})

    rsps.add_callback(responses.GET, HOST + "/latest", callback=respond)
    with pytest.raises(ServerError) as info:
        manager.get_latest_version()
    assert info.value.cancelled is True
    assert seen == [False]
    assert manager.cancel_requests() is True