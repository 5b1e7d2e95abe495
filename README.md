# eternal

`eternal` keeps long-running programs going for a single user. Each service is
described in a small YAML file. A daemon starts, stops and tracks these services,
and a command-line client talks to the daemon over a Unix socket.

## Installation

```
pip install .
```

## Layout on disk

Everything lives under `~/.eternal`:

- `~/.eternal/services/<name>.yaml` holds one service definition.
- `~/.eternal/enabled.yaml` holds the list of services that start when the daemon starts.

A service definition has two fields:

```yaml
# Command to execute
exec: "python3 -m http.server 8000"
# Working directory
dir: "/srv/www"
```

`exec` is required; a definition without it is skipped when the daemon loads
services. It is split on whitespace into a program and its arguments (no shell
quoting). `dir` is optional; when empty the daemon's own working directory is used.

## Running the daemon

```
eternal-daemon
```

The daemon creates `~/.eternal/services` if needed, loads every `*.yaml` file in
it, starts the services listed in `enabled.yaml`, and listens on
`/tmp/eternal.sock` (any old file at that path is removed first). It logs to
standard error and exits on SIGINT or SIGTERM.

## Using the client

```
eternal new myservice        # create ~/.eternal/services/myservice.yaml from a template
eternal enable myservice     # start it whenever the daemon starts
eternal disable myservice    # stop starting it automatically
eternal delete myservice     # disable it and remove its definition

eternal start myservice      # ask the daemon to start it now
eternal stop myservice       # ask the daemon to stop it (sends SIGINT)
eternal status myservice     # prints running, stopped or error
```

`start`, `stop` and `status` need a running daemon. The others only edit files in
`~/.eternal`; `enable` refuses a service that has no definition file. The client
prints a message and exits with status 1 when something fails.

A service whose process exits with a non-zero status, is killed by a signal, or
cannot be launched is reported as `error`; one that exits with status 0 is
`stopped`.

## Using it from Python

```python
from eternal.process import Manager

manager = Manager("/home/me/.eternal/services")
manager.load_services()
manager.start_service("myservice")
print(manager.get_status("myservice").value)   # running
manager.stop_service("myservice")
```

`Manager` methods raise `eternal.process.ServiceError` for unknown services,
starting a running service or stopping one that is not running.

The modules are:

- `eternal.config`: `ServiceConfig`, `load_config`, `load_enabled_services`,
  `enable_service`, `disable_service`; problems raise `ConfigError`.
- `eternal.ipc`: `RequestType`, `Request`, `Response`, and `encode`,
  `decode_request`, `decode_response` for the one-JSON-object-per-line protocol.
- `eternal.process`: `Manager`, `ManagedProcess`, `ProcessStatus`, `ServiceError`.
- `eternal.daemon`: `handle_request`, `handle_connection`, `autostart`, `serve`, `main`.
- `eternal.cli`: `enable`, `disable`, `new_service`, `delete_service` (each takes an
  optional `base_dir` in place of `~/.eternal`), `send_request`, `main`; failures
  raise `CommandError`.

## What it does not do

- Services are not restarted when they exit. `RequestType.RESTART` exists in the
  protocol, but the daemon answers it with "Unknown request type".
- Service output is discarded; nothing is written to log files.
- Definitions are read once, when the daemon starts. A service created with
  `eternal new` is unknown to a running daemon until the daemon is restarted.
- Stopping the daemon does not stop the services it started, and service state is
  not kept across daemon restarts.
- The socket path is fixed at `/tmp/eternal.sock`.

## Tests

```
pip install .[test]
pytest
```