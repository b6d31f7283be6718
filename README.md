# selfupdater

A small updater that runs next to an application. It reads its settings
from `updater-config.json` in the application directory and asks a server
for the latest version number. If that number is higher than the installed
one, it downloads the new release and installs it. It then writes the new
version back into the config file.

Messages shown to the user and sent to the server are in Spanish.

## Installation

```
pip install selfupdater
```

## Configuration

Put `updater-config.json` in the application directory:

```json
{
    "mainAppInfo": {
        "fileName": "myapp.exe",
        "version": "1.0"
    },
    "serverInfo": {
        "hostName": "https://updates.example.com",
        "getLatestVersionRoute": "/latest",
        "downloadVersionRoute": "/download",
        "sendLogRoute": "/log"
    }
}
```

`version` is a string that holds a number. If it is missing or is not a
number, the installed version is taken as `0`. Request URLs are built by
joining `hostName` and the route.

The server answers as follows:

- **latest version route** (GET): a JSON object whose `data` field holds
  the version as a string, for example `{"data": "1.2"}`.
- **download route** (GET): the file itself. The file name is taken from
  the `Content-Disposition` header (`filename="..."`).
- **log route** (POST): takes JSON bodies of the form `{"message": "..."}`.
  If a log cannot be delivered, the update carries on.

## What gets installed

- A download whose name ends in `.exe` is written into the application
  directory. It replaces any file with the same name.
- A download whose name ends in `.zip` is saved and extracted into a
  `tempUpdate` folder inside the application directory. Each top-level
  entry extracted from it replaces the first file with the same name found
  under the application directory. The search runs in name order and skips
  `tempUpdate`. Entries whose names end in `zip` are left alone. An entry
  with no match is copied to the top of the application directory. The
  `tempUpdate` folder is removed at the end. If any copy failed, the folder
  is kept and the update fails with the list of errors.
- Any other file name makes the update fail.

After a successful install, the `version` field under `mainAppInfo` in the
config file is set to the new version. The file is rewritten as indented
JSON with sorted keys.

## Command line

```
selfupdater [--app-dir DIR] [--countdown SECONDS]
```

- `--app-dir`: the folder that holds the application and
  `updater-config.json`. Defaults to the current directory.
- `--countdown`: the number of seconds to count down before the command
  exits. Defaults to 5 and must not be negative.

Progress messages are printed as the update runs, followed by the final
result. On failure, `Error en la actualización` and the reason are printed
to standard error, and the exit status is 1. The countdown then prints one
line per second (`Cerrando app en...5`, `...4`, and so on) before the
command returns.

## From Python

```python
from selfupdater.app import Updater, UpdateError

updater = Updater("/path/to/app", report=print)
try:
    message = updater.run()
except UpdateError as exc:
    print("update failed:", exc)
```

- `Updater(app_dir, server=None, files=None, report=None)`: `report`
  receives progress messages. If no `server` is given, a
  `selfupdater.server.ServerManager` is built from the config file.
- `Updater.run()` returns the final message. It returns `None` if the
  update was cancelled and raises `UpdateError` if it failed.
- `Updater.cancel()` asks a running update to stop. It returns `False`
  once the download has started or the update is finished, because it can
  no longer be cancelled at that point.
- `Updater.install(file_name, data)`, `install_exe`, `install_zip` and
  `update_local_version` run the individual steps.

The other modules can be used on their own:

- `selfupdater.config`: `load_config(path)`, `parse_config(data)` and
  `write_local_version(path, version)`. These return and use the
  `UpdaterConfig`, `MainAppInfo` and `ServerInfo` dataclasses and raise
  `ConfigError`.
- `selfupdater.server`: `ServerManager(info, session=None)` with
  `get_latest_version()`, `download_new_version()`, `send_log(message)` and
  `cancel_requests()`. It also provides `parse_latest_version(body)` and
  `parse_content_disposition(header)`. Failures raise `ServerError`, whose
  `cancelled` attribute marks aborted requests.
- `selfupdater.files`: `FileManager` collects copy failures in its `errors`
  list. The module also provides `json_is_valid(data)`.
- `selfupdater.countdown`: `QuitCountdown(seconds)` yields one countdown
  message per `tick()` or per iteration step.

## What it does not do

- It does not start the application after updating. Once the countdown
  ends, the command exits.
- It has no graphical window. Progress is reported as text only.
- The command line offers no way to cancel a running update. Cancelling is
  only possible through `Updater.cancel()`.

## Running the tests

```
pip install selfupdater[test]
pytest
```