"""Tests for the row pipeline driver.

Covers row counting and ordering, every row-scoped failure kind, file-scoped
aborts and the template check that precedes any file access.
"""

import os
from pathlib import Path

import pytest

from csvargs.config import EXIT_OK, EXIT_ROWS_FAILED
from csvargs.exceptions import TemplateError
from csvargs.pipeline import driver
from csvargs.pipeline.driver import (
    FileFailure,
    OutcomeKind,
    RowOutcome,
    RowPipeline,
    RunResult,
    run_pipeline,
)
from csvargs.pipeline.executor import ExecutionResult

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses sh syntax")


@posix_only
def test_header_scenario_runs_each_row_in_order(write_csv, capfd):
    path = write_csv("people.csv", "name,email\nAlice,a@x.com\nBob,b@x.com\n")
    result = run_pipeline("echo {{row.name}}", [path])
    assert capfd.readouterr().out == "Alice\nBob\n"
    assert [o.row_number for o in result.outcomes] == [1, 2]
    assert all(o.kind is OutcomeKind.SUCCESS for o in result.outcomes)
    assert result.exit_code == EXIT_OK


@posix_only
def test_no_header_scenario(write_csv, capfd):
    path = write_csv("people.csv", "Alice,a@x.com\n")
    result = run_pipeline("echo {{row['0']}}", [path], has_header=False)
    assert capfd.readouterr().out == "Alice\n"
    assert len(result.outcomes) == 1
    assert result.ok


@posix_only
def test_failing_command_is_recorded_per_row(write_csv):
    path = write_csv("people.csv", "name\nAlice\nBob\nCarol\n")
    result = run_pipeline("exit 1", [path])
    assert [o.kind for o in result.outcomes] == [OutcomeKind.COMMAND_FAILURE] * 3
    assert [o.row_number for o in result.outcomes] == [1, 2, 3]
    assert all(o.exit_code == 1 for o in result.outcomes)
    assert result.exit_code == EXIT_ROWS_FAILED


@posix_only
def test_command_stderr_ends_up_in_detail(write_csv):
    path = write_csv("people.csv", "name\nAlice\n")
    result = run_pipeline("echo no such {{row.name}} >&2; exit 3", [path])
    (outcome,) = result.outcomes
    assert outcome.exit_code == 3
    assert outcome.detail == "Command failed with status 3: no such Alice"


def test_rows_are_executed_in_file_order(write_csv, recording_executor):
    first = write_csv("a.csv", "n\n1\n2\n")
    second = write_csv("b.csv", "n\n3\n")
    result = run_pipeline("run {{row.n}}", [first, second], executor=recording_executor)
    assert recording_executor.commands == ["run 1", "run 2", "run 3"]
    assert [(o.file, o.row_number) for o in result.outcomes] == [
        (str(first), 1),
        (str(first), 2),
        (str(second), 1),
    ]


def test_extra_cell_is_row_shape_error_and_not_executed(write_csv, recording_executor):
    path = write_csv("shape.csv", "a,b\n1,2,3\n4,5\n")
    result = run_pipeline("echo {{row.a}}", [path], executor=recording_executor)
    assert [o.kind for o in result.outcomes] == [
        OutcomeKind.ROW_SHAPE_ERROR,
        OutcomeKind.SUCCESS,
    ]
    assert recording_executor.commands == ["echo 4"]
    assert result.exit_code == EXIT_ROWS_FAILED


def test_no_header_rows_must_match_first_row_width(write_csv, recording_executor):
    path = write_csv("shape.csv", "a,b\nc\nd,e\n")
    result = run_pipeline(
        "echo {{row['0']}}", [path], has_header=False, executor=recording_executor
    )
    assert [o.kind for o in result.outcomes] == [
        OutcomeKind.SUCCESS,
        OutcomeKind.ROW_SHAPE_ERROR,
        OutcomeKind.SUCCESS,
    ]
    assert recording_executor.commands == ["echo a", "echo d"]


def test_empty_value_renders_and_missing_field_fails(write_csv, recording_executor):
    path = write_csv("people.csv", "name,email\nAlice,\n")
    ok = run_pipeline("mail '{{row.email}}'", [path], executor=recording_executor)
    assert ok.ok
    assert recording_executor.commands == ["mail ''"]

    bad = run_pipeline("mail {{row.phone}}", [path], executor=recording_executor)
    (outcome,) = bad.outcomes
    assert outcome.kind is OutcomeKind.RENDER_FAILURE
    assert "'phone' not found" in outcome.detail


def test_parse_error_is_row_scoped(write_csv, recording_executor):
    path = write_csv("bad.csv", 'name\n"x"y\nBob\n')
    result = run_pipeline("echo {{row.name}}", [path], executor=recording_executor)
    assert [o.kind for o in result.outcomes] == [
        OutcomeKind.PARSE_ERROR,
        OutcomeKind.SUCCESS,
    ]
    assert result.outcomes[0].line_number == 2
    assert recording_executor.commands == ["echo Bob"]


def test_launch_error_is_row_scoped(write_csv):
    path = write_csv("people.csv", "name\nAlice\nBob\n")

    def failing_executor(command):
        from csvargs.exceptions import LaunchError

        raise LaunchError("Failed to execute command: No such file or directory")

    result = run_pipeline("echo {{row.name}}", [path], executor=failing_executor)
    assert [o.kind for o in result.outcomes] == [OutcomeKind.LAUNCH_ERROR] * 2
    assert result.outcomes[0].exit_code is None


def test_missing_file_aborts_only_that_file(tmp_path: Path, write_csv, recording_executor):
    good = write_csv("good.csv", "name\nAlice\n")
    missing = tmp_path / "missing.csv"
    result = run_pipeline(
        "echo {{row.name}}", [missing, good], executor=recording_executor
    )
    assert result.file_failures == [
        FileFailure(str(missing), result.file_failures[0].detail, 0)
    ]
    assert "Failed to open file" in result.file_failures[0].detail
    assert recording_executor.commands == ["echo Alice"]
    assert result.exit_code == EXIT_ROWS_FAILED


def test_duplicate_header_aborts_file(write_csv, recording_executor):
    path = write_csv("dup.csv", "a,a\n1,2\n")
    result = run_pipeline("echo {{row.a}}", [path], executor=recording_executor)
    assert result.outcomes == []
    assert len(result.file_failures) == 1
    assert recording_executor.commands == []


def test_invalid_template_aborts_before_any_file(tmp_path: Path, monkeypatch):
    opened = []
    monkeypatch.setattr(driver, "CsvRecordStream", lambda *a: opened.append(a))
    with pytest.raises(TemplateError):
        run_pipeline("echo {{row.name", [tmp_path / "people.csv"])
    assert opened == []


def test_header_only_file_runs_nothing(write_csv, recording_executor):
    path = write_csv("header.csv", "name,email\n")
    result = run_pipeline("echo {{row.name}}", [path], executor=recording_executor)
    assert result.outcomes == []
    assert result.ok


def test_unknown_template_fields_are_warned(write_csv, recording_executor, caplog):
    path = write_csv("people.csv", "name\nAlice\n")
    with caplog.at_level("WARNING", logger="csvargs.pipeline.driver"):
        run_pipeline("echo {{row.nmae}}", [path], executor=recording_executor)
    assert "missing from the header: nmae" in caplog.text


def test_result_accumulates_across_calls(write_csv, recording_executor):
    path = write_csv("people.csv", "name\nAlice\n")
    pipeline = RowPipeline("echo {{row.name}}", executor=recording_executor)
    result = RunResult()
    pipeline.process_file(path, result)
    pipeline.process_file(path, result)
    assert len(result.outcomes) == 2
    assert result.succeeded_count == 2


def test_run_result_exit_code_and_failed_rows():
    result = RunResult()
    assert result.ok and result.exit_code == EXIT_OK
    result.record(RowOutcome("a.csv", 1, 2, OutcomeKind.SUCCESS, 0))
    result.record(RowOutcome("a.csv", 2, 3, OutcomeKind.RENDER_FAILURE, detail="x"))
    assert [o.row_number for o in result.failed_rows] == [2]
    assert result.exit_code == EXIT_ROWS_FAILED


def test_file_failure_alone_fails_the_run():
    result = RunResult()
    result.record_file_failure(FileFailure("a.csv", "Failed to open file: a.csv"))
    assert not result.ok
    assert result.exit_code == EXIT_ROWS_FAILED


def test_default_executor_is_execute_command():
    pipeline = RowPipeline("echo")
    assert pipeline._execute is driver.execute_command


def test_executor_result_type_is_honoured(write_csv):
    path = write_csv("people.csv", "name\nAlice\n")
    result = run_pipeline(
        "x", [path], executor=lambda command: ExecutionResult(2, "bad")
    )
    assert result.outcomes[0].detail == "Command failed with status 2: bad"


def test_exception_raised_inside_template_is_row_scoped(write_csv, recording_executor):
    path = write_csv("people.csv", "email\nnoatsign\nb@x.com\n")
    result = run_pipeline(
        "echo {{ row.email.split('@').pop(1) }}", [path], executor=recording_executor
    )
    assert [o.kind for o in result.outcomes] == [
        OutcomeKind.RENDER_FAILURE,
        OutcomeKind.SUCCESS,
    ]
    assert "pop index out of range" in result.outcomes[0].detail
    assert recording_executor.commands == ["echo x.com"]


@posix_only
def test_nul_in_cell_fails_only_that_row(tmp_path: Path, capfd):
    path = tmp_path / "nul.csv"
    path.write_bytes(b"name\na\x00b\nBob\n")
    result = run_pipeline("echo {{ row.name }}", [path])
    first, second = result.outcomes
    assert not first.succeeded
    assert second.succeeded
    assert capfd.readouterr().out == "Bob\n"


def test_rows_before_undecodable_line_still_run(tmp_path: Path, recording_executor):
    path = tmp_path / "tail.csv"
    path.write_bytes(b"n\n1\n2\n3\n\xff\n")
    result = run_pipeline("echo {{ row.n }}", [path], executor=recording_executor)
    assert recording_executor.commands == ["echo 1", "echo 2", "echo 3"]
    (failure,) = result.file_failures
    assert failure.rows_processed == 3
    assert "line 5" in failure.detail


def test_failures_are_not_logged_at_warning(tmp_path: Path, write_csv, caplog):
    path = write_csv("people.csv", "name\nAlice\n")
    with caplog.at_level("WARNING", logger="csvargs.pipeline.driver"):
        result = run_pipeline(
            "x",
            [path, tmp_path / "missing.csv"],
            executor=lambda command: ExecutionResult(1),
        )
    assert len(result.failed_rows) == 1
    assert len(result.file_failures) == 1
    assert caplog.records == []
