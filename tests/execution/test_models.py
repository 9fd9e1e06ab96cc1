"""Tests for taskchain.execution.models — policy resolution, definitions, results."""

from datetime import UTC, datetime, timedelta

import pytest

from taskchain.core.errors import InvalidJobDefinitionError
from taskchain.execution.models import (
    BUILTIN_BEHAVIOR,
    BehaviorPolicy,
    JobDefinition,
    JobEvent,
    JobResult,
    TaskDefinition,
    resolve,
)


def noop():
    return True


class TestResolve:
    def test_task_override_wins(self):
        assert resolve("max_retries", BehaviorPolicy(max_retries=3), BehaviorPolicy(max_retries=1)) == 3

    def test_engine_default_when_task_unset(self):
        assert resolve("max_retries", BehaviorPolicy(), BehaviorPolicy(max_retries=1)) == 1

    def test_builtin_when_both_unset(self):
        assert resolve("max_retries", None, None) == 0
        assert resolve("skip_item_on_fail", None, BehaviorPolicy()) is False
        assert resolve("do_not_break_on_error", BehaviorPolicy(), None) is False

    def test_explicit_false_is_an_override(self):
        task = BehaviorPolicy(skip_item_on_fail=False, do_not_break_on_error=False)
        engine = BehaviorPolicy(skip_item_on_fail=True, do_not_break_on_error=True)
        assert resolve("skip_item_on_fail", task, engine) is False
        assert resolve("do_not_break_on_error", task, engine) is False

    def test_explicit_zero_is_an_override(self):
        assert resolve("max_retries", BehaviorPolicy(max_retries=0), BehaviorPolicy(max_retries=5)) == 0

    def test_fields_resolve_independently(self):
        task = BehaviorPolicy(max_retries=2)
        engine = BehaviorPolicy(skip_item_on_fail=True, max_retries=9)
        assert resolve("max_retries", task, engine) == 2
        assert resolve("skip_item_on_fail", task, engine) is True
        assert resolve("do_not_break_on_error", task, engine) is False

    def test_custom_builtin(self):
        builtin = BehaviorPolicy(do_not_break_on_error=True, skip_item_on_fail=True, max_retries=7)
        assert resolve("max_retries", None, None, builtin) == 7

    def test_unset_builtin_field_raises(self):
        with pytest.raises(InvalidJobDefinitionError):
            resolve("max_retries", None, None, BehaviorPolicy())


class TestBehaviorPolicy:
    def test_defaults_are_unset(self):
        policy = BehaviorPolicy()
        assert policy.to_dict() == {
            "do_not_break_on_error": None,
            "skip_item_on_fail": None,
            "max_retries": None,
        }

    def test_builtin(self):
        assert BUILTIN_BEHAVIOR == BehaviorPolicy(
            do_not_break_on_error=False, skip_item_on_fail=False, max_retries=0
        )

    def test_negative_retries_rejected(self):
        with pytest.raises(InvalidJobDefinitionError) as exc_info:
            BehaviorPolicy(max_retries=-1)
        assert exc_info.value.field == "max_retries"

    @pytest.mark.parametrize("value", [1.5, "2", True])
    def test_non_int_retries_rejected(self, value):
        with pytest.raises(InvalidJobDefinitionError) as exc_info:
            BehaviorPolicy(max_retries=value)  # type: ignore[arg-type]
        assert exc_info.value.field == "max_retries"

    @pytest.mark.parametrize("field_name", ["do_not_break_on_error", "skip_item_on_fail"])
    def test_non_bool_flags_rejected(self, field_name):
        with pytest.raises(InvalidJobDefinitionError) as exc_info:
            BehaviorPolicy(**{field_name: "yes"})
        assert exc_info.value.field == field_name

    def test_frozen(self):
        policy = BehaviorPolicy(max_retries=1)
        with pytest.raises(AttributeError):
            policy.max_retries = 2  # type: ignore[misc]


class TestDefinitions:
    def test_task_defaults(self):
        task = TaskDefinition(noop)
        assert task.delay == 0.0
        assert task.data is None
        assert task.behavior is None
        assert task.label == "noop"

    def test_task_label_prefers_name(self):
        assert TaskDefinition(noop, name="first").label == "first"

    def test_task_rejects_non_callable(self):
        with pytest.raises(InvalidJobDefinitionError):
            TaskDefinition("not callable")  # type: ignore[arg-type]

    def test_task_rejects_negative_delay(self):
        with pytest.raises(InvalidJobDefinitionError):
            TaskDefinition(noop, delay=-1)

    @pytest.mark.parametrize("delay", [None, "1", True])
    def test_task_rejects_non_numeric_delay(self, delay):
        with pytest.raises(InvalidJobDefinitionError) as exc_info:
            TaskDefinition(noop, delay=delay)  # type: ignore[arg-type]
        assert exc_info.value.field == "delay"

    def test_task_accepts_int_delay_and_any_payload(self):
        task = TaskDefinition(noop, delay=2, data="https://example.com/a")
        assert task.delay == 2
        assert task.data == "https://example.com/a"

    def test_job_tasks_copied_to_tuple(self):
        tasks = [TaskDefinition(noop)]
        job = JobDefinition(name="j", tasks=tasks)
        tasks.append(TaskDefinition(noop))
        assert isinstance(job.tasks, tuple)
        assert job.task_count == 1

    def test_job_requires_name(self):
        with pytest.raises(InvalidJobDefinitionError):
            JobDefinition(name="")

    def test_job_rejects_foreign_entries(self):
        with pytest.raises(InvalidJobDefinitionError):
            JobDefinition(name="j", tasks=[noop])  # type: ignore[list-item]


class TestJobResult:
    def test_succeeded(self):
        assert JobResult(job_name="j", total_tasks=1).succeeded is True
        assert JobResult(job_name="j", total_tasks=1, failed_count=1).succeeded is False
        assert JobResult(job_name="j", total_tasks=1, is_terminated=True).succeeded is False

    def test_duration(self):
        start = datetime(2025, 1, 1, tzinfo=UTC)
        result = JobResult(
            job_name="j",
            total_tasks=0,
            started_at=start,
            completed_at=start + timedelta(seconds=2.5),
        )
        assert result.duration_seconds == 2.5
        assert JobResult(job_name="j", total_tasks=0).duration_seconds is None

    def test_to_dict(self):
        d = JobResult(job_name="j", total_tasks=3, processed_count=2, retry_count=1).to_dict()
        assert d["job_name"] == "j"
        assert d["processed_count"] == 2
        assert d["retry_count"] == 1
        assert d["started_at"] is None


def test_event_names():
    assert [e.value for e in JobEvent] == [
        "job_started",
        "job_completed",
        "job_failed",
        "job_terminated",
        "task_started",
        "task_completed",
        "task_retrying",
        "task_skipping",
        "task_failed",
    ]
