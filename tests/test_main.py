import os

import pytest

import main
from core.errors import SpawnError
from core.harness import ExecutionHarness
from core.report import read_summary

posix_only = pytest.mark.skipif(os.name != "posix", reason="needs POSIX signals and fork/exec")


def test_empty_workload_is_rejected(tmp_path, capsys):
    assert main.main(["fcfs", "--output-dir", str(tmp_path)]) == 2
    assert "empty workload" in capsys.readouterr().err


def test_missing_workload_file_exits_with_error(tmp_path, capsys):
    code = main.main(["fcfs", "--workload", str(tmp_path / "nope.txt"),
                      "--output-dir", str(tmp_path)])
    assert code == 1
    assert "[error]" in capsys.readouterr().err


def test_bad_quantum_exits_with_error(tmp_path):
    assert main.main(["rr", "--command", "true", "--quantum", "0",
                      "--output-dir", str(tmp_path)]) == 1


@posix_only
def test_offline_fcfs_writes_trace_and_summary(tmp_path, capsys):
    code = main.main(["fcfs", "--command", "echo a", "--command", "echo b",
                      "--output-dir", str(tmp_path)])
    assert code == 0
    out = capsys.readouterr().out.splitlines()
    assert [line.split("|")[0] for line in out] == ["echo a", "echo b"]
    rows = read_summary(str(tmp_path / "result_offline_FCFS.csv"))
    assert [r["Command"] for r in rows] == ["echo a", "echo b"]


@posix_only
def test_all_policies_with_charts(tmp_path):
    workload = tmp_path / "workload.txt"
    workload.write_text("echo one\ntrue\n")
    charts = tmp_path / "charts"
    code = main.main(["all", "--workload", str(workload), "--output-dir", str(tmp_path),
                      "--gantt", str(charts), "--summary"])
    assert code == 0
    for name in ("result_offline_FCFS.csv", "result_offline_RR.csv", "result_offline_MLFQ.csv"):
        assert (tmp_path / name).exists()
    assert (charts / "comparison.png").exists()


def test_spawn_failure_exits_with_error(tmp_path, monkeypatch, capsys):
    def refuse(self, command, non_blocking=True):
        raise SpawnError(f"could not spawn {command!r}: out of pipes")

    monkeypatch.setattr(ExecutionHarness, "spawn", refuse)
    code = main.main(["fcfs", "--command", "echo a", "--output-dir", str(tmp_path)])
    assert code == 1
    assert "out of pipes" in capsys.readouterr().err
    assert not (tmp_path / "result_offline_FCFS.csv").exists()
