# memtasks

memtasks is an in-memory task manager with a small JSON HTTP API. Clients
submit tasks over HTTP. Each task runs in a background thread. A client can
look a task up or cancel it while it runs. All state lives in process memory.

## Installation

```
pip install .
```

## Running the server

```
memtasks
```

The same entry point can be started with `python -m memtasks.application`.
By default the server listens on `0.0.0.0:8080`.

Press Ctrl+C to shut the HTTP server down. The command then exits with status
0. It exits with status 1, with the error on standard error, in two cases:

- the configuration cannot be loaded;
- the address cannot be listened on.

## Configuration

At startup, `memtasks.config.load_config()` reads `./config/.env`.

**When the file cannot be opened**, every setting takes its default, including
`HTTP_EXPOSE_API_SPECIFICATION=true`. Environment variables are ignored in
this case.

**When the file exists**, settings are merged from two places:

- the values in the file;
- the process environment, which overrides values from the file.

Empty and zero values then fall back to their defaults.
`HTTP_EXPOSE_API_SPECIFICATION` is different: it is on only when it is set to
a true value. The accepted values are `1`, `t`, `T`, `true`, `True` and
`TRUE`. Malformed integers or booleans raise `ValueError`.

| Variable                        | Default        |
|---------------------------------|----------------|
| `LOG_LEVEL`                     | `debug`        |
| `REST_ADDRESS`                  | `0.0.0.0:8080` |
| `HTTP_READ_TIME_OUT`            | `30` (seconds) |
| `HTTP_WRITE_TIME_OUT`           | `30` (seconds) |
| `HTTP_EXPOSE_API_SPECIFICATION` | see above      |
| `MAX_CONCURRENT_TASKS`          | `1000`         |

The two timeouts are used differently:

- `HTTP_READ_TIME_OUT` is applied as the socket timeout of each connection.
- `HTTP_WRITE_TIME_OUT` is kept on the server (`TaskServer.write_timeout_seconds`). It is not applied to connections.

Log levels are `trace`, `debug`, `info`, `warn`, `error`, `fatal` and `panic`.
Case does not matter. An unknown name means `info`. Logs go to standard output
as JSON lines, one object per message, with these keys:

- `level`;
- the message's fields;
- `time`;
- `message`.

## HTTP API

All routes are under `/api`.

### Create a task

```
POST /api/tasks
{"type": "default", "data": {"title": "Fetch report", "description": "nightly"}}
```

- `type` is optional. It defaults to `default`, and `default` is the only supported type.
- `data.title` is required.
- Keys match regardless of case.

A successful request returns `201 Created` with the task:

```json
{"id":"0190b2f4-...","title":"Fetch report","description":"nightly","status":"pending","created_at":"2024-07-01T12:00:00Z"}
```

Task IDs are version 7 (time-ordered) UUIDs. Times are RFC 3339 in local time,
to the second.

A default task runs for a random whole number of minutes, from three to five.
While it runs, its status is `running`. When it ends normally:

- its status becomes `finished`;
- its JSON gains `started_at`, `finished_at` and `processing_time`, for example `"3m0.001s"`.

An empty description is left out. At most `MAX_CONCURRENT_TASKS` tasks run at
once. The others stay `pending` until a slot frees up.

### Get a task

```
GET /api/tasks/{taskId}
```

Returns `200 OK` with the task's JSON.

### Delete a task

```
DELETE /api/tasks/{taskId}
```

Cancels the task's run and removes it from memory. Returns `200 OK` with an
empty body.

### API description

When the API specification is exposed, `GET /api/swagger.json` returns a
short OpenAPI document listing the three operations.

### Errors

Application errors are returned as JSON, for example
`{"message":"task not found","code":404}`:

| Status | When |
|--------|------|
| 400    | The body is not valid JSON, the title is missing, the data has wrong field types, or the task type is unsupported |
| 404    | The task ID is unknown |
| 500    | An unexpected failure occurs |

Other paths return `404` with a plain-text body. A method a route does not
accept returns `405` with an `Allow` header.

## Using it from Python

The pieces can be wired together without the HTTP listener:

```python
from memtasks.logger import Logger
from memtasks.storage import TaskStorage
from memtasks.repository import StorageTaskRepository
from memtasks.service import (
    CreateTaskRequest,
    ServiceConfiguration,
    TaskManagerService,
)

logger = Logger("info")
repository = StorageTaskRepository(logger, TaskStorage())
service = TaskManagerService(
    ServiceConfiguration(logger=logger, task_repository=repository, max_concurrent_tasks=10)
)

task = service.to_task_object(CreateTaskRequest(data={"title": "Fetch report"}))
worker = service.create_task(task)   # the background thread running the task
print(service.get_task_by_id(task.id).to_json())
service.delete_task(task.id)
```

Notes on the individual pieces:

- `DefaultTask.create(title, description)` builds a task directly.
- Setting `run_seconds` on a task fixes its run length.
- `Logger(level, stream)` writes to any text stream.

A `TaskServer` answers requests in-process through
`TaskServer.handle(method, path, body)`. It returns the status, the headers
and the body. `TaskServer.start()` listens on the configured address, and
`TaskServer.close()` stops it.

`memtasks.application.Application(config)` wires everything from a
`memtasks.config.Configuration`. Its `start()` and `close()` methods run and
stop the server.

Failures raise `memtasks.errors.AppError`, which carries a `message` and an
HTTP `code`. `memtasks.errors.error_response(err)` turns any exception into a
status and a JSON body.

## What it does not do

Tasks are kept only in memory:

- nothing is persisted;
- every task is lost when the process stops;
- there is no listing of all tasks.

There is no authentication or access control on the HTTP API.