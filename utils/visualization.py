"""
Visualization: Gantt chart of the context switch trace and statistics
"""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from typing import List, Dict, Optional
from core.scheduler_base import GanttEntry, NUM_QUEUES


class Visualizer:
    """Scheduling result visualization"""

    def __init__(self):
        # one color per process, one per MLFQ level
        self.colors = plt.cm.Set3.colors
        self.queue_colors = ['#4C72B0', '#DD8452', '#C44E52']

    def draw_gantt_chart(self, gantt_data: List[GanttEntry], algorithm_name: str,
                         save_path: Optional[str] = None, show: bool = False):
        """
        Draw the Gantt chart

        Args:
            gantt_data: dispatch windows of one run
            algorithm_name: chart title
            save_path: PNG path (None: don't save)
            show: open a window
        """
        if not gantt_data:
            print(f"No Gantt chart data for {algorithm_name}")
            return

        fig, ax = plt.subplots(figsize=(16, 6))

        rows = sorted({(entry.index, entry.command) for entry in gantt_data})
        index_to_y = {index: y for y, (index, _) in enumerate(rows)}
        has_queues = any(entry.queue is not None for entry in gantt_data)

        for entry in gantt_data:
            duration = entry.end_time - entry.start_time
            y_pos = index_to_y[entry.index]

            if entry.queue is not None:
                color = self.queue_colors[entry.queue % len(self.queue_colors)]
            else:
                color = self.colors[entry.index % len(self.colors)]

            ax.barh(y_pos, max(duration, 1), left=entry.start_time, height=0.8,
                    color=color, edgecolor='black', linewidth=0.5)

        ax.set_yticks(range(len(rows)))
        ax.set_yticklabels([f'P{index} {command}'[:40] for index, command in rows])
        ax.set_xlabel('Time (ms)', fontsize=12)
        ax.set_ylabel('Process', fontsize=12)
        ax.set_title(f'Gantt Chart - {algorithm_name}', fontsize=14, fontweight='bold')
        ax.grid(axis='x', alpha=0.3)

        if has_queues:
            legend_elements = [
                mpatches.Patch(color=self.queue_colors[level], label=f'Queue {level}')
                for level in range(NUM_QUEUES)
            ]
            ax.legend(handles=legend_elements, loc='upper right')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Gantt chart saved to {save_path}")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def compare_algorithms(self, results: List[Dict], save_path: Optional[str] = None,
                           show: bool = False):
        """
        Compare several runs side by side

        Args:
            results: results dictionaries of each run
            save_path: PNG path
            show: open a window
        """
        if not results:
            print("No results to compare")
            return

        algorithms = [r['algorithm'] for r in results]
        panels = [
            ('avg_waiting_time', 'Average Waiting Time (ms)', 'skyblue', '{:.1f}'),
            ('avg_turnaround_time', 'Average Turnaround Time (ms)', 'lightcoral', '{:.1f}'),
            ('avg_response_time', 'Average Response Time (ms)', 'lightgreen', '{:.1f}'),
            ('context_switches', 'Context Switches', 'plum', '{:.0f}'),
        ]

        fig, axes = plt.subplots(2, 2, figsize=(16, 12))
        fig.suptitle('Scheduling Policies Comparison', fontsize=16, fontweight='bold')

        for ax, (key, label, color, fmt) in zip(axes.flat, panels):
            values = [r['statistics'][key] for r in results]
            bars = ax.bar(range(len(algorithms)), values, color=color, edgecolor='black')
            ax.set_xticks(range(len(algorithms)))
            ax.set_xticklabels(algorithms, rotation=30, ha='right', fontsize=9)
            ax.set_ylabel(label, fontsize=11)
            ax.set_title(label, fontsize=12, fontweight='bold')
            ax.grid(axis='y', alpha=0.3)

            for bar, value in zip(bars, values):
                ax.text(bar.get_x() + bar.get_width()/2., bar.get_height(),
                        fmt.format(value), ha='center', va='bottom', fontsize=9)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Comparison chart saved to {save_path}")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def print_statistics_table(self, results: List[Dict]):
        """
        Print the per-run statistics as a table

        Args:
            results: results dictionaries of each run
        """
        print("\n" + "="*120)
        print("Scheduling policy comparison")
        print("="*120)
        print(f"{'Policy':<32} {'Avg wait':>12} {'Avg turnaround':>16} {'Avg response':>14} "
              f"{'CPU util(%)':>12} {'Switches':>10} {'Errors':>8}")
        print("-"*120)

        for result in results:
            algo = result['algorithm']
            stats = result['statistics']
            print(f"{algo:<32} "
                  f"{stats['avg_waiting_time']:>12.2f} "
                  f"{stats['avg_turnaround_time']:>16.2f} "
                  f"{stats['avg_response_time']:>14.2f} "
                  f"{stats['cpu_utilization']:>12.2f} "
                  f"{stats['context_switches']:>10} "
                  f"{stats['errors']:>8}")

        print("="*120 + "\n")

    def print_process_details(self, results: Dict):
        """
        Per-process details of one run

        Args:
            results: results dictionary
        """
        print(f"\n{'='*100}")
        print(f"Process details - {results['algorithm']}")
        print(f"{'='*100}")
        print(f"{'#':<4} {'Command':<30} {'Error':>6} {'Start':>8} {'Done':>8} "
              f"{'Burst':>8} {'Wait':>8} {'Turn':>8} {'Resp':>8}")
        print(f"{'-'*100}")

        for process in results['processes']:
            print(f"{process.index:<4} "
                  f"{process.command[:30]:<30} "
                  f"{'yes' if process.error else 'no':>6} "
                  f"{process.start_time if process.start_time is not None else 'N/A':>8} "
                  f"{process.completion_time if process.completion_time is not None else 'N/A':>8} "
                  f"{process.burst_time:>8} "
                  f"{process.waiting_time:>8} "
                  f"{process.turnaround_time:>8} "
                  f"{process.response_time:>8}")

        print(f"{'='*100}\n")
