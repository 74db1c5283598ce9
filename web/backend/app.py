"""
Process scheduling engine - FastAPI backend

Runs an offline batch of commands on the server and returns the trace,
per-process metrics and the summary rows.
"""

import io
import tempfile
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from core.errors import SpawnError
from core.harness import ExecutionHarness
from core.process import Process
from core.report import read_summary
from schedulers import FCFSScheduler, RoundRobinScheduler, MLFQScheduler

app = FastAPI(
    title="Process Scheduling Engine",
    description="Runs real commands under classical CPU scheduling policies",
    version="1.0.0"
)

# the API runs arbitrary commands: only pages served from this machine may call it
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

ALGORITHM_MAP = {
    'FCFS': {'class': FCFSScheduler, 'name': 'FCFS (First-Come, First-Served)', 'preemptive': False},
    'RoundRobin': {'class': RoundRobinScheduler, 'name': 'Round Robin', 'preemptive': True},
    'MLFQ': {'class': MLFQScheduler, 'name': 'Multi-Level Feedback Queue', 'preemptive': True},
}


class SimulationRequest(BaseModel):
    commands: List[str] = Field(..., min_length=1)
    algorithms: List[str] = ['FCFS']
    quantum: int = Field(50, gt=0)
    quanta: List[int] = Field([10, 20, 40], min_length=3, max_length=3)
    boost_time: int = Field(200, gt=0)


class GanttEntry(BaseModel):
    index: int
    command: str
    start_time: int
    end_time: int
    queue: Optional[int] = None


class ProcessResult(BaseModel):
    index: int
    command: str
    error: bool
    output: str
    start_time: int
    completion_time: int
    burst_time: int
    turnaround_time: int
    waiting_time: int
    response_time: int


class SimulationResult(BaseModel):
    algorithm: str
    gantt_chart: List[GanttEntry]
    trace: List[str]
    processes: List[ProcessResult]
    summary: List[Dict[str, str]]
    statistics: Dict[str, float]
    event_log: List[str]


def get_harness() -> ExecutionHarness:
    return ExecutionHarness()


def check_origin(http_request: Request):
    """Refuse browser requests sent from pages outside ALLOWED_ORIGINS"""
    origin = http_request.headers.get("origin")
    if origin is not None and origin not in ALLOWED_ORIGINS:
        raise HTTPException(status_code=403, detail=f"Origin not allowed: {origin}")


def run_scheduler(commands: List[str], algorithm: str, request: SimulationRequest,
                  harness: ExecutionHarness) -> SimulationResult:
    """Run one policy on a fresh batch and convert the results"""
    if algorithm not in ALGORITHM_MAP:
        raise ValueError(f"Unknown algorithm: {algorithm}")

    params = {}
    if algorithm == 'RoundRobin':
        params['quantum'] = request.quantum
    elif algorithm == 'MLFQ':
        params['time_slices'] = tuple(request.quanta)
        params['boost_time'] = request.boost_time

    processes = [Process(command, 0, i) for i, command in enumerate(commands)]
    trace = io.StringIO()
    with tempfile.TemporaryDirectory() as output_dir:
        scheduler = ALGORITHM_MAP[algorithm]['class'](
            processes, harness=harness, output_dir=output_dir, trace_stream=trace, **params)
        result = scheduler.run()
        summary = read_summary(result['result_file'])

    return SimulationResult(
        algorithm=result['algorithm'],
        gantt_chart=[
            GanttEntry(index=e.index, command=e.command, start_time=e.start_time,
                       end_time=e.end_time, queue=e.queue)
            for e in result['gantt_chart']
        ],
        trace=trace.getvalue().splitlines(),
        processes=[
            ProcessResult(index=p.index, command=p.command, error=p.error, output=p.output,
                          start_time=p.start_time, completion_time=p.completion_time,
                          burst_time=p.burst_time, turnaround_time=p.turnaround_time,
                          waiting_time=p.waiting_time, response_time=p.response_time)
            for p in result['processes']
        ],
        summary=summary,
        statistics=result['statistics'],
        event_log=result['event_log'],
    )


@app.get("/")
def root():
    return {"message": "Process Scheduling Engine API", "version": "1.0.0"}


@app.get("/algorithms")
def get_algorithms():
    """Available offline policies"""
    return {
        "algorithms": [
            {"id": key, "name": info['name'], "preemptive": info['preemptive']}
            for key, info in ALGORITHM_MAP.items()
        ]
    }


@app.post("/simulate", dependencies=[Depends(check_origin)])
def simulate(request: SimulationRequest, harness: ExecutionHarness = Depends(get_harness)):
    """Run the requested policies one after another"""
    try:
        results = [run_scheduler(request.commands, algorithm, request, harness)
                   for algorithm in request.algorithms]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SpawnError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "results": results}


@app.post("/simulate/compare", dependencies=[Depends(check_origin)])
def compare_algorithms(request: SimulationRequest,
                       harness: ExecutionHarness = Depends(get_harness)):
    """Run several policies on the same batch and line up their averages"""
    comparison = {
        'algorithms': [],
        'avg_waiting_time': [],
        'avg_turnaround_time': [],
        'avg_response_time': [],
        'cpu_utilization': [],
        'context_switches': []
    }
    results = []
    try:
        for algorithm in request.algorithms:
            result = run_scheduler(request.commands, algorithm, request, harness)
            results.append(result)

            stats = result.statistics
            comparison['algorithms'].append(algorithm)
            for key in ('avg_waiting_time', 'avg_turnaround_time', 'avg_response_time',
                        'cpu_utilization', 'context_switches'):
                comparison[key].append(stats.get(key, 0))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SpawnError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {"success": True, "results": results, "comparison": comparison}
