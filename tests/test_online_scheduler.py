import os
import subprocess
import sys

import pytest

from core.errors import SpawnError
from core.report import read_summary
from core.stats import CommandStatsStore
from schedulers import SJFScheduler, ShortestJobFirst
from utils.input_parser import StdinCommandSource
from conftest import FakeHarness, ScriptedSource

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

posix_only = pytest.mark.skipif(os.name != "posix", reason="needs POSIX signals and fork/exec")


def make_scheduler(clock, harness, batches, tmp_path, trace, **kwargs):
    return SJFScheduler(source=ScriptedSource(batches), harness=harness, clock=clock,
                        output_dir=str(tmp_path), trace_stream=trace, **kwargs)


def test_two_commands_then_exit(clock, harness_factory, trace, tmp_path):
    harness = harness_factory({"echo x": 3, "echo y": 4})
    source = ScriptedSource([["echo x", "echo y", "exit"]])
    result = ShortestJobFirst(source=source, harness=harness, clock=clock,
                              output_dir=str(tmp_path), trace_stream=trace)

    rows = read_summary(str(tmp_path / "result_online_SJF.csv"))
    assert [r["Command"] for r in rows] == ["echo x", "echo y"]
    assert len(trace.getvalue().splitlines()) == 2
    assert len(result['processes']) == 2
    assert source.close_called


def test_unseen_commands_tie_on_default_and_run_in_arrival_order(clock, harness_factory, trace,
                                                                 tmp_path):
    harness = harness_factory()
    scheduler = make_scheduler(clock, harness, [["b cmd", "a cmd", "exit"]], tmp_path, trace)
    scheduler.run()
    assert harness.spawned == ["b cmd", "a cmd"]


def test_shortest_prediction_runs_first(clock, harness_factory, trace, tmp_path):
    store = CommandStatsStore()
    store.record("slow", 500)
    store.record("fast", 20)
    harness = harness_factory({"slow": 500, "fast": 20})
    scheduler = make_scheduler(clock, harness, [["slow", "fast", "exit"]], tmp_path, trace,
                               command_stats=store)
    scheduler.run()
    assert harness.spawned == ["fast", "slow"]


def test_empty_injected_collaborators_are_kept(clock, harness_factory, trace, tmp_path):
    store = CommandStatsStore()
    source = ScriptedSource([])
    harness = harness_factory()
    scheduler = SJFScheduler(source=source, command_stats=store, harness=harness, clock=clock,
                             output_dir=str(tmp_path), trace_stream=trace)
    assert len(store) == 0
    assert scheduler.command_stats is store
    assert scheduler.source is source
    assert scheduler.harness is harness
    assert scheduler.clock is clock


def test_measured_burst_updates_prediction(clock, harness_factory, trace, tmp_path):
    harness = harness_factory({"job": 300, "other": 50})
    store = CommandStatsStore()
    scheduler = make_scheduler(clock, harness, [["job"], ["other", "job", "exit"]], tmp_path,
                               trace, command_stats=store)
    scheduler.run()

    entry = store.get("job")
    assert entry.index == 0
    assert entry.count == 2
    assert entry.burst_time == 300
    # after the first run "job" predicts 300 ms, so the unseen "other"
    # (default 1000 ms) waits behind the second "job"
    assert harness.spawned == ["job", "job", "other"]


def test_waiting_equals_response_and_metrics_add_up(clock, harness_factory, trace, tmp_path):
    harness = harness_factory({"a": 50, "b": 30})
    scheduler = make_scheduler(clock, harness, [["a", "b", "exit"]], tmp_path, trace,
                               poll_interval=100)
    scheduler.run()

    a, b = scheduler.processes
    assert (a.start_time, a.completion_time) == (0, 50)
    assert (b.arrival_time, b.start_time, b.completion_time) == (0, 150, 180)
    for p in scheduler.processes:
        assert p.waiting_time == p.response_time
        assert p.turnaround_time == p.waiting_time + p.burst_time
        assert p.completion_time >= p.start_time >= p.arrival_time
    assert trace.getvalue().splitlines() == ["a|0|50", "b|150|180"]


def test_later_arrivals_are_picked_up_between_polls(clock, harness_factory, trace, tmp_path):
    harness = harness_factory({"long": 400, "short": 10})
    scheduler = make_scheduler(clock, harness, [["long"], [], ["short", "exit"]], tmp_path, trace)
    scheduler.run()

    long_p, short_p = scheduler.processes
    assert long_p.completion_time == 400
    assert short_p.arrival_time == 600
    assert short_p.waiting_time == 0


def test_end_of_input_acts_like_exit(clock, harness_factory, trace, tmp_path):
    harness = harness_factory()
    scheduler = make_scheduler(clock, harness, [["echo z"]], tmp_path, trace)
    scheduler.run()
    assert len(read_summary(str(tmp_path / "result_online_SJF.csv"))) == 1


def test_lines_after_exit_are_ignored(clock, harness_factory, trace, tmp_path):
    harness = harness_factory()
    scheduler = make_scheduler(clock, harness, [["one", "exit", "two"], ["three"]], tmp_path,
                               trace)
    scheduler.run()
    assert harness.spawned == ["one"]


def test_exec_failure_is_reported_online(clock, harness_factory, trace, tmp_path):
    harness = harness_factory(missing={"ghost"})
    scheduler = make_scheduler(clock, harness, [["ghost run", "echo ok", "exit"]], tmp_path,
                               trace)
    scheduler.run()
    rows = read_summary(str(tmp_path / "result_online_SJF.csv"))
    assert (rows[0]["Finished"], rows[0]["Error"]) == ("No", "Yes")
    assert rows[1]["Error"] == "No"


def test_spawn_failure_marks_only_that_process(clock, trace, tmp_path):
    class FlakyHarness(FakeHarness):
        def run_to_completion(self, command):
            if command == "boom":
                raise SpawnError("fork failed")
            return super().run_to_completion(command)

    harness = FlakyHarness(clock)
    scheduler = make_scheduler(clock, harness, [["boom", "fine", "exit"]], tmp_path, trace)
    result = scheduler.run()

    boom, fine = scheduler.processes
    assert boom.error and boom.completed
    assert not fine.error and fine.completed
    assert result['statistics']['errors'] == 1


@posix_only
def test_stdin_source_with_real_commands(trace, tmp_path):
    read_fd, write_fd = os.pipe()
    os.write(write_fd, b"echo x\necho y\nexit\n")
    os.close(write_fd)

    with os.fdopen(read_fd, "rb") as stream:
        scheduler = SJFScheduler(source=StdinCommandSource(stream), output_dir=str(tmp_path),
                                 trace_stream=trace, poll_interval=10)
        scheduler.run()

    rows = read_summary(str(tmp_path / "result_online_SJF.csv"))
    assert len(rows) == 2
    assert all(r["Error"] == "No" for r in rows)
    assert [p.output for p in scheduler.processes] == ["x\n", "y\n"]


@posix_only
def test_cli_online_mode_exits_cleanly(tmp_path):
    completed = subprocess.run(
        [sys.executable, "main.py", "sjf", "--output-dir", str(tmp_path)],
        input="echo x\necho y\nexit\n",
        capture_output=True, text=True, cwd=ROOT, timeout=60,
    )
    assert completed.returncode == 0, completed.stderr
    trace_lines = completed.stdout.splitlines()
    assert [line.split("|")[0] for line in trace_lines] == ["echo x", "echo y"]
    assert len(read_summary(str(tmp_path / "result_online_SJF.csv"))) == 2
