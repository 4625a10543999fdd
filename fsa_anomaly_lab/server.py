"""FastAPI surface for dashboards: lifecycle controls and snapshot reads."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Callable
from datetime import datetime

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from networkx.readwrite import json_graph
from pydantic import BaseModel, Field

from fsa_anomaly_lab.config import DEFAULT_NODE_COUNT, SPEED_MULTIPLIERS
from fsa_anomaly_lab.core.simulation import Simulation
from fsa_anomaly_lab.fsa.generator import DISTRIBUTIONS
from fsa_anomaly_lab.fsa.model import (
    Event,
    State,
    forbidden_pairs,
    table_to_dict,
    transition_graph,
)
from fsa_anomaly_lab.metrics.results import SimulationSnapshot

logger = logging.getLogger(__name__)

STREAM_POLL_SECONDS = 0.1


class NodeModel(BaseModel):
    id: str
    state: str
    severity: int
    last_event: str | None
    anomalies: list[str]
    badges: list[str]
    health: int


class LogEntryModel(BaseModel):
    timestamp: datetime
    node_id: str
    event: str
    previous_state: str
    new_state: str
    labels: list[str]
    line: str


class TrendPointModel(BaseModel):
    timestamp: datetime
    count: int


class SnapshotModel(BaseModel):
    run_id: str
    node_count: int
    total_anomalies: int
    total_events: int
    tick_count: int
    running: bool
    tick_interval_ms: float
    nodes: list[NodeModel]
    log: list[LogEntryModel]
    trend: list[TrendPointModel]


class ResetRequest(BaseModel):
    # Clamped to at least 1 by the engine rather than rejected here
    node_count: int | None = DEFAULT_NODE_COUNT


class SpeedRequest(BaseModel):
    multiplier: float = Field(gt=0)


class ModelDescription(BaseModel):
    states: list[str]
    events: list[str]
    transitions: dict[str, dict[str, str | None]]
    forbidden: list[tuple[str, str]]
    distributions: dict[str, dict[str, float]]
    speed_multipliers: list[int]
    graph: dict[str, object]


def to_model(snapshot: SimulationSnapshot) -> SnapshotModel:
    return SnapshotModel.model_validate(snapshot.to_dict())


class ConnectionManager:
    def __init__(self) -> None:
        self.active_connections: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: str) -> None:
        for connection in list(self.active_connections):
            with contextlib.suppress(Exception):
                await connection.send_text(message)


def create_app(simulation: Simulation | None = None) -> FastAPI:
    if simulation is None:
        simulation = Simulation()

    app = FastAPI(title="FSA Anomaly Lab API")
    app.state.simulation = simulation
    manager = ConnectionManager()
    unsubscribers: list[Callable[[], None]] = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event() -> None:
        loop = asyncio.get_running_loop()

        # Ticks arrive on the clock thread; hop onto the event loop to broadcast
        def _on_tick(snapshot: SimulationSnapshot) -> None:
            if not manager.active_connections:
                return
            message = json.dumps({"type": "tick", "data": snapshot.to_dict()})
            asyncio.run_coroutine_threadsafe(manager.broadcast(message), loop)

        unsubscribers.append(simulation.subscribe(_on_tick))

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        simulation.stop()
        for unsubscribe in unsubscribers:
            unsubscribe()
        unsubscribers.clear()

    @app.get("/api/snapshot")
    async def get_snapshot() -> SnapshotModel:
        return to_model(simulation.snapshot())

    @app.get("/api/model")
    async def get_model() -> ModelDescription:
        return ModelDescription(
            states=[state.value for state in State],
            events=[event.value for event in Event],
            transitions=table_to_dict(),
            forbidden=[(state.value, event.value) for state, event in forbidden_pairs()],
            distributions={state.value: dist.to_dict() for state, dist in DISTRIBUTIONS.items()},
            speed_multipliers=list(SPEED_MULTIPLIERS),
            graph=json_graph.node_link_data(transition_graph(), edges="edges"),
        )

    # Lifecycle endpoints are sync: stop/reset join the clock worker
    @app.post("/api/start")
    def start() -> SnapshotModel:
        simulation.start()
        return to_model(simulation.snapshot())

    @app.post("/api/stop")
    def stop() -> SnapshotModel:
        simulation.stop()
        return to_model(simulation.snapshot())

    @app.post("/api/step")
    def step() -> SnapshotModel:
        return to_model(simulation.step())

    @app.post("/api/reset")
    def reset(request: ResetRequest) -> SnapshotModel:
        return to_model(simulation.reset(request.node_count))

    @app.post("/api/speed")
    def set_speed(request: SpeedRequest) -> SnapshotModel:
        simulation.set_speed(request.multiplier)
        return to_model(simulation.snapshot())

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await manager.connect(websocket)
        try:
            await websocket.send_text(
                json.dumps({"type": "snapshot", "data": simulation.snapshot().to_dict()})
            )
            while True:
                await websocket.receive_text()
        except WebSocketDisconnect:
            manager.disconnect(websocket)

    @app.get("/api/stream")
    async def stream_snapshots() -> StreamingResponse:
        async def event_generator():
            last_seen: tuple[str, int] | None = None
            while True:
                snapshot = simulation.snapshot()
                marker = (snapshot.run_id, snapshot.tick_count)
                if marker != last_seen:
                    last_seen = marker
                    yield f"data: {json.dumps(snapshot.to_dict())}\n\n"
                await asyncio.sleep(STREAM_POLL_SECONDS)

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    return app


def run_server(simulation: Simulation, host: str = "0.0.0.0", port: int = 8000) -> None:
    import uvicorn

    app = create_app(simulation)
    print(f"Starting simulation server at http://{host}:{port}")
    logger.info("Serving run %s", simulation.snapshot().run_id)
    uvicorn.run(app, host=host, port=port)
