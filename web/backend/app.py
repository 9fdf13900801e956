"""
CPU Scheduling Simulator - FastAPI backend
"""

import asyncio
import json
import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from core.exceptions import ConfigurationError
from core.process import IoEvent, ProcessSpec
from core.scheduler_base import SimulationResult
from schedulers import ALGORITHM_MAP, DEFAULT_BOOST_INTERVAL, resolve_algorithm, run_simulation

logger = logging.getLogger(__name__)

app = FastAPI(
    title="CPU Scheduling Simulator",
    description="Tick-based FCFS / SJF / RR / STCF / MLFQ scheduling simulator with step-by-step replay",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models
class IoEventInput(BaseModel):
    offset: int
    duration: int


class ProcessInput(BaseModel):
    arrival_time: int
    burst_time: int
    io_events: List[IoEventInput] = []


class QueueInput(BaseModel):
    quantum: Optional[int] = None
    allotment: Optional[int] = None


class SimulationRequest(BaseModel):
    processes: List[ProcessInput]
    algorithms: List[str] = ['FCFS']
    legacy_trace: bool = False
    quantum: Optional[int] = None
    queues: Optional[List[QueueInput]] = None
    boost_interval: Optional[int] = DEFAULT_BOOST_INTERVAL
    safety_bound: Optional[int] = None


class ReplayRequest(BaseModel):
    processes: List[ProcessInput]
    algorithm: str
    legacy_trace: bool = False
    quantum: Optional[int] = None
    queues: Optional[List[QueueInput]] = None
    boost_interval: Optional[int] = DEFAULT_BOOST_INTERVAL
    safety_bound: Optional[int] = None


def create_process_specs(process_inputs: List[ProcessInput]) -> List[ProcessSpec]:
    """ProcessInput -> ProcessSpec"""
    return [
        ProcessSpec(
            arrival_time=p.arrival_time,
            burst_time=p.burst_time,
            io_events=[IoEvent(io.offset, io.duration) for io in p.io_events],
        )
        for p in process_inputs
    ]


def policy_params(algorithm: str, request) -> Dict:
    """Pick the request fields the algorithm understands"""
    key = resolve_algorithm(algorithm)
    if key == 'STCF':
        return {'legacy_trace': request.legacy_trace}
    if key == 'RR':
        return {} if request.quantum is None else {'quantum': request.quantum}
    if key == 'MLFQ':
        params = {'boost_interval': request.boost_interval}
        if request.queues is not None:
            params['queues'] = [(q.quantum, q.allotment) for q in request.queues]
        return params
    return {}


def run_scheduler(process_inputs: List[ProcessInput], algorithm: str, request) -> SimulationResult:
    """Run one algorithm for a request"""
    return run_simulation(
        create_process_specs(process_inputs),
        algorithm,
        params=policy_params(algorithm, request),
        safety_bound=request.safety_bound,
    )


@app.get("/")
async def root():
    """API information"""
    return {"message": "CPU Scheduling Simulator API", "version": "1.0.0"}


@app.get("/algorithms")
async def get_algorithms():
    """Available algorithms"""
    return {
        "algorithms": [
            {
                "id": algo_id,
                "name": info['name'],
                "preemptive": info['preemptive'],
                "params": info['params'],
            }
            for algo_id, info in ALGORITHM_MAP.items()
        ]
    }


@app.post("/simulate")
async def simulate(request: SimulationRequest):
    """Run the simulation for each requested algorithm"""
    try:
        results = [run_scheduler(request.processes, algorithm, request).to_dict()
                   for algorithm in request.algorithms]
        return {"success": True, "results": results}

    except ConfigurationError as e:
        logger.info("Rejected simulation request: %s", e)
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/simulate/compare")
async def compare_algorithms(request: SimulationRequest):
    """Run several algorithms and line up their statistics"""
    try:
        results = []
        comparison = {
            'algorithms': [],
            'avg_waiting_time': [],
            'avg_turnaround_time': [],
            'cpu_utilization': [],
            'context_switches': [],
            'final_time': [],
        }

        for algorithm in request.algorithms:
            result = run_scheduler(request.processes, algorithm, request)
            results.append(result.to_dict())

            stats = result.statistics
            comparison['algorithms'].append(result.algorithm)
            comparison['avg_waiting_time'].append(stats['avg_waiting_time'])
            comparison['avg_turnaround_time'].append(stats['avg_turnaround_time'])
            comparison['cpu_utilization'].append(stats['cpu_utilization'])
            comparison['context_switches'].append(stats['context_switches'])
            comparison['final_time'].append(result.final_time)

        return {
            "success": True,
            "results": results,
            "comparison": comparison
        }

    except ConfigurationError as e:
        logger.info("Rejected simulation request: %s", e)
        raise HTTPException(status_code=400, detail=str(e))


# Step-by-step replay over WebSocket
class ReplaySession:
    """Cursor over the steps of a finished run"""

    def __init__(self, result: SimulationResult):
        self.result = result
        self.cursor = 0

    @property
    def is_complete(self) -> bool:
        return self.cursor >= len(self.result.steps)

    def step(self) -> Dict:
        """Next step and whether the replay has reached the end"""
        if self.is_complete:
            return self._final({'complete': True, 'step': None})

        step = self.result.steps[self.cursor]
        self.cursor += 1
        message = {'complete': self.is_complete, 'step': step.to_dict()}
        if self.is_complete:
            message = self._final(message)
        return message

    def _final(self, message: Dict) -> Dict:
        message['metrics'] = [dict(row) for row in self.result.metrics]
        message['statistics'] = dict(self.result.statistics)
        message['completed'] = self.result.completed
        message['final_time'] = self.result.final_time
        return message


@app.websocket("/ws/replay")
async def websocket_replay(websocket: WebSocket):
    """Replay endpoint: init runs the simulation, step/run stream its trace"""
    await websocket.accept()
    session: Optional[ReplaySession] = None

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
                if not isinstance(message, dict):
                    raise ValueError("Message must be a JSON object")
                action = message.get('action')

                if action == 'init':
                    request = ReplayRequest(**message)
                    result = run_scheduler(request.processes, request.algorithm, request)
                    session = ReplaySession(result)
                    await websocket.send_json({
                        'type': 'initialized',
                        'algorithm': result.algorithm,
                        'process_count': len(request.processes),
                        'total_steps': len(result.steps),
                    })

                elif action == 'step':
                    if session is None:
                        raise ValueError("Replay not initialized")
                    await websocket.send_json({'type': 'step_result', **session.step()})

                elif action == 'run':
                    # Stream the remaining steps; speed is steps per second
                    if session is None:
                        raise ValueError("Replay not initialized")
                    speed = float(message.get('speed', 1.0))
                    if speed <= 0:
                        raise ValueError("Speed must be positive")
                    delay = 1.0 / speed

                    while True:
                        result = session.step()
                        await websocket.send_json({'type': 'step_result', **result})
                        if result['complete']:
                            break
                        await asyncio.sleep(delay)

                else:
                    raise ValueError(f"Unknown action: {action}")

            except ValueError as e:
                # Covers bad JSON, request validation and ConfigurationError
                logger.info("Rejected replay message: %s", e)
                await websocket.send_json({'type': 'error', 'message': str(e)})

    except WebSocketDisconnect:
        logger.debug("Replay client disconnected")


@app.get("/sample-processes")
async def get_sample_processes():
    """Sample workloads"""
    return {
        "samples": [
            {
                "name": "Basic (3 processes)",
                "processes": [
                    {"arrival_time": 0, "burst_time": 10, "io_events": []},
                    {"arrival_time": 2, "burst_time": 5, "io_events": []},
                    {"arrival_time": 5, "burst_time": 3, "io_events": []}
                ]
            },
            {
                "name": "With I/O (3 processes)",
                "processes": [
                    {"arrival_time": 0, "burst_time": 8,
                     "io_events": [{"offset": 2, "duration": 3}, {"offset": 5, "duration": 2}]},
                    {"arrival_time": 1, "burst_time": 4,
                     "io_events": [{"offset": 1, "duration": 2}]},
                    {"arrival_time": 2, "burst_time": 6, "io_events": []}
                ]
            },
            {
                "name": "Long jobs (boost demo for MLFQ)",
                "processes": [
                    {"arrival_time": 0, "burst_time": 30, "io_events": []},
                    {"arrival_time": 0, "burst_time": 25, "io_events": []},
                    {"arrival_time": 12, "burst_time": 4,
                     "io_events": [{"offset": 1, "duration": 1}]}
                ]
            }
        ]
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
