import io
import json
import re
import threading
import time
import uuid
from concurrent.futures import CancelledError
from datetime import datetime, timezone

import pytest

from memtasks.entity import (
    DefaultTask,
    DefaultTaskInput,
    TaskStatus,
    format_duration,
    generate_task_id,
)
from memtasks.logger import Logger

RFC3339 = re.compile(r"^\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d(Z|[+-]\d\d:\d\d)$")


def quiet_logger(level="info"):
    return Logger(level, stream=io.StringIO())


@pytest.mark.parametrize(
    "status, expected",
    [
        (TaskStatus.PENDING, "pending"),
        (TaskStatus.RUNNING, "running"),
        (TaskStatus.CANCELED, "canceled"),
        (TaskStatus.FINISHED, "finished"),
    ],
)
def test_status_written_to_json(status, expected):
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    task = DefaultTask(id="id-1", title="Task", status=status, created_at=created)
    document = json.loads(task.to_json())
    assert document["status"] == expected


def test_create_makes_pending_task():
    task = DefaultTask.create("Test Task", "desc")
    assert task.title == "Test Task"
    assert task.description == "desc"
    assert task.status is TaskStatus.PENDING
    assert task.started_at is None and task.finished_at is None
    assert uuid.UUID(task.id).version == 7


def test_create_gives_distinct_ids():
    ids = {DefaultTask.create("t").id for _ in range(50)}
    assert len(ids) == 50


def test_input_description_defaults_to_none():
    assert DefaultTaskInput(title="Task").description is None


def test_generate_task_id_embeds_current_time():
    before = time.time_ns() // 1_000_000
    value = uuid.UUID(generate_task_id())
    after = time.time_ns() // 1_000_000
    assert value.version == 7
    assert before <= value.int >> 80 <= after


def test_to_json_of_new_task_omits_unset_fields():
    task = DefaultTask.create("Test Task")
    document = json.loads(task.to_json())
    assert list(document) == ["id", "title", "status", "created_at"]
    assert document["status"] == "pending"
    assert RFC3339.match(document["created_at"])


def test_to_json_keeps_description_and_utc_marker():
    created = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    task = DefaultTask(id="id-1", title="Task", description="desc", created_at=created)
    document = json.loads(task.to_json())
    assert list(document) == ["id", "title", "description", "status", "created_at"]
    assert document["description"] == "desc"
    assert document["created_at"] == "2024-01-02T03:04:05Z"


def test_execute_finishes_and_records_times():
    task = DefaultTask.create("Task")
    task.run_seconds = 0.05
    task.execute(threading.Event(), quiet_logger())
    assert task.status is TaskStatus.FINISHED
    assert task.finished_at >= task.started_at
    assert task.processing_time.total_seconds() >= 0.05
    document = json.loads(task.to_json())
    assert document["status"] == "finished"
    assert RFC3339.match(document["started_at"])
    assert RFC3339.match(document["finished_at"])
    assert document["processing_time"].endswith("s")


def test_execute_logs_trace_ticks():
    stream = io.StringIO()
    task = DefaultTask.create("Ticking", "slow")
    task.run_seconds = 1.2
    task.execute(threading.Event(), Logger("trace", stream=stream))
    records = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert records
    assert records[0]["message"] == "Task is running"
    assert records[0]["task_id"] == task.id
    assert records[0]["title"] == "Ticking"


def test_execute_already_cancelled_raises():
    task = DefaultTask.create("Task")
    event = threading.Event()
    event.set()
    with pytest.raises(CancelledError):
        task.execute(event, quiet_logger())
    assert task.status is TaskStatus.CANCELED
    assert task.started_at is not None
    assert task.finished_at is None


def test_execute_cancelled_while_running():
    task = DefaultTask.create("Task")
    task.run_seconds = 30
    event = threading.Event()
    errors = []

    def run():
        try:
            task.execute(event, quiet_logger())
        except CancelledError as exc:
            errors.append(exc)

    worker = threading.Thread(target=run)
    worker.start()
    time.sleep(0.05)
    event.set()
    worker.join(5)
    assert not worker.is_alive()
    assert len(errors) == 1
    assert task.status is TaskStatus.CANCELED


def test_format_duration_zero():
    assert format_duration(0) == "0s"


def test_format_duration_fractional_seconds():
    assert format_duration(1.5) == "1.5s"


def test_format_duration_units_by_size():
    assert format_duration(2e-7).endswith("ns")
    assert format_duration(2e-5).endswith("µs")
    assert format_duration(0.02).endswith("ms")
    assert "m" in format_duration(125) and "h" not in format_duration(125)
    assert format_duration(7300).startswith("2h")


@pytest.mark.parametrize("seconds", [0.25, 3, 61.5, 3700])
def test_format_duration_negative_is_prefixed(seconds):
    assert format_duration(-seconds) == "-" + format_duration(seconds)