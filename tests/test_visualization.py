from core.process import Process, ProcessState
from core.scheduler_base import GanttEntry
from utils.visualization import Visualizer


def sample_result(name, waiting):
    p = Process("echo a", 0, 0)
    p.start_time, p.completion_time, p.burst_time = 0, 5, 5
    p.completed = True
    p.calculate_time_metrics()
    return {
        'algorithm': name,
        'statistics': {
            'avg_waiting_time': waiting,
            'avg_turnaround_time': waiting + 5,
            'avg_response_time': waiting,
            'cpu_utilization': 100.0,
            'context_switches': 2,
            'errors': 0,
        },
        'gantt_chart': [GanttEntry(0, "echo a", 0, 5, ProcessState.DONE)],
        'processes': [p],
    }


def test_gantt_chart_png(tmp_path):
    path = tmp_path / "gantt.png"
    entries = [
        GanttEntry(0, "a", 0, 10, ProcessState.STOPPED, queue=0),
        GanttEntry(1, "b", 10, 30, ProcessState.DONE, queue=0),
        GanttEntry(0, "a", 30, 50, ProcessState.DONE, queue=1),
    ]
    Visualizer().draw_gantt_chart(entries, "MLFQ", save_path=str(path))
    assert path.stat().st_size > 0


def test_empty_gantt_chart_draws_nothing(tmp_path, capsys):
    path = tmp_path / "none.png"
    Visualizer().draw_gantt_chart([], "FCFS", save_path=str(path))
    assert not path.exists()
    assert "No Gantt chart data" in capsys.readouterr().out


def test_comparison_png(tmp_path):
    path = tmp_path / "comparison.png"
    Visualizer().compare_algorithms([sample_result("FCFS", 2.5), sample_result("RR", 1.0)],
                                    save_path=str(path))
    assert path.stat().st_size > 0


def test_tables(capsys):
    visualizer = Visualizer()
    result = sample_result("FCFS", 2.5)
    visualizer.print_statistics_table([result])
    visualizer.print_process_details(result)
    out = capsys.readouterr().out
    assert "FCFS" in out
    assert "2.50" in out
    assert "echo a" in out
