#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Process scheduling engine - command line entry point

Runs real commands under FCFS, Round Robin, MLFQ (offline batch) or
online SJF (commands read from stdin until `exit`).
"""

import argparse
import os
import re
import sys
from typing import Dict, List, Optional, Sequence

from core.errors import SchedulerError
from core.process import Process, create_process_copy
from schedulers import FCFSScheduler, RoundRobinScheduler, MLFQScheduler, SJFScheduler
from utils.input_parser import InputParser
from utils.visualization import Visualizer


# offline policies and their default parameters
ALGORITHMS = {
    'fcfs': {
        'name': 'FCFS (First-Come, First-Served)',
        'class': FCFSScheduler,
        'params': {}
    },
    'rr': {
        'name': 'Round Robin',
        'class': RoundRobinScheduler,
        'params': {'quantum': 50}
    },
    'mlfq': {
        'name': 'Multi-Level Feedback Queue',
        'class': MLFQScheduler,
        'params': {'time_slices': (10, 20, 40), 'boost_time': 200}
    },
}


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Schedule real commands and report timing metrics.")
    sub = parser.add_subparsers(dest="policy", required=True)

    def add_common(p, offline=True):
        p.add_argument("--output-dir", default=".", help="Directory for result_*.csv files.")
        p.add_argument("--verbose", action="store_true", help="Print the event log to stderr.")
        p.add_argument("--summary", action="store_true", help="Print statistics tables after the run.")
        if offline:
            p.add_argument("--workload", help="File with one command per line.")
            p.add_argument("--command", action="append", default=[], dest="commands",
                           help="Command to schedule (repeatable).")
            p.add_argument("--gantt", metavar="DIR", help="Save Gantt charts as PNG into DIR.")

    p = sub.add_parser("fcfs", help="First-come, first-served.")
    add_common(p)

    p = sub.add_parser("rr", help="Round robin.")
    add_common(p)
    p.add_argument("--quantum", type=int, default=ALGORITHMS['rr']['params']['quantum'],
                   help="Time slice in ms.")

    p = sub.add_parser("mlfq", help="Multi-level feedback queue.")
    add_common(p)
    add_mlfq_options(p)

    p = sub.add_parser("all", help="Run FCFS, RR and MLFQ on the same workload.")
    add_common(p)
    p.add_argument("--quantum", type=int, default=ALGORITHMS['rr']['params']['quantum'],
                   help="Round robin time slice in ms.")
    add_mlfq_options(p)

    p = sub.add_parser("sjf", help="Online shortest-job-first, commands from stdin.")
    add_common(p, offline=False)

    return parser.parse_args(argv)


def add_mlfq_options(p: argparse.ArgumentParser):
    defaults = ALGORITHMS['mlfq']['params']
    p.add_argument("--quanta", type=int, nargs=3, metavar=("Q0", "Q1", "Q2"),
                   default=list(defaults['time_slices']), help="Time slice per queue level in ms.")
    p.add_argument("--boost", type=int, default=defaults['boost_time'],
                   help="Priority boost period in ms.")


def load_workload(args: argparse.Namespace) -> List[Process]:
    """Processes from --workload and --command, in that order"""
    processes: List[Process] = []
    if args.workload:
        processes.extend(InputParser.parse_file(args.workload))
    processes.extend(InputParser.parse_lines(args.commands))
    for i, process in enumerate(processes):
        process.index = i
    return processes


def build_scheduler(policy: str, processes: List[Process], args: argparse.Namespace):
    algo_info = ALGORITHMS[policy]
    params = dict(algo_info['params'])
    if policy == 'rr':
        params['quantum'] = args.quantum
    elif policy == 'mlfq':
        params['time_slices'] = tuple(args.quanta)
        params['boost_time'] = args.boost
    return algo_info['class'](processes, output_dir=args.output_dir, **params)


def save_results(results: List[Dict], output_dir: str):
    """Save Gantt charts (and a comparison chart for several runs)"""
    os.makedirs(output_dir, exist_ok=True)
    visualizer = Visualizer()

    for result in results:
        safe_algo = re.sub(r'[^A-Za-z0-9]+', '_', result['algorithm']).strip('_')
        save_path = os.path.join(output_dir, f"gantt_{safe_algo}.png")
        visualizer.draw_gantt_chart(result['gantt_chart'], result['algorithm'],
                                    save_path=save_path, show=False)

    if len(results) > 1:
        visualizer.compare_algorithms(results, save_path=os.path.join(output_dir, "comparison.png"),
                                      show=False)


def print_summary(results: List[Dict]):
    visualizer = Visualizer()
    visualizer.print_statistics_table(results)
    for result in results:
        visualizer.print_process_details(result)


def run_offline(args: argparse.Namespace) -> int:
    processes = load_workload(args)
    if not processes:
        print("[error] empty workload: use --workload or --command", file=sys.stderr)
        return 2

    policies = ['fcfs', 'rr', 'mlfq'] if args.policy == 'all' else [args.policy]
    os.makedirs(args.output_dir, exist_ok=True)

    results = []
    for policy in policies:
        batch = [create_process_copy(p) for p in processes]
        scheduler = build_scheduler(policy, batch, args)
        results.append(scheduler.run(verbose=args.verbose))

    if args.gantt:
        save_results(results, args.gantt)
    if args.summary:
        print_summary(results)
    return 0


def run_online(args: argparse.Namespace) -> int:
    os.makedirs(args.output_dir, exist_ok=True)
    result = SJFScheduler(output_dir=args.output_dir).run(verbose=args.verbose)
    if args.summary:
        print_summary([result])
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main function"""
    args = parse_arguments(argv)
    try:
        if args.policy == 'sjf':
            return run_online(args)
        return run_offline(args)
    except (SchedulerError, OSError, ValueError) as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)
