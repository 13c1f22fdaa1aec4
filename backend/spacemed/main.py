"""FastAPI application serving the space medical monitoring dashboard."""
from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.responses import StreamingResponse

from .config import simulation_config
from .monitor import TelemetryMonitor
from .schemas import Alert, DashboardView, InfoMessage, InfoTopic, Snapshot
from .store import MonitorState
from .views import info_message, render_dashboard

app = FastAPI(title="Space Medical Monitoring System", version="1.0.0")

logger = logging.getLogger(__name__)

monitor = TelemetryMonitor(simulation_config)


@app.on_event("startup")
async def startup_event() -> None:
    monitor.store.bind_loop(asyncio.get_running_loop())
    monitor.start()


@app.on_event("shutdown")
async def shutdown_event() -> None:
    monitor.stop()


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/dashboard", response_model=DashboardView)
async def get_dashboard() -> DashboardView:
    return monitor.dashboard()


@app.get("/snapshot", response_model=Snapshot)
async def get_snapshot() -> Snapshot:
    return monitor.state().snapshot


@app.get("/alerts", response_model=list[Alert])
async def get_alerts() -> list[Alert]:
    return monitor.state().alerts


@app.post("/readings", response_model=DashboardView)
async def receive_readings(update: Snapshot) -> DashboardView:
    """Inbound hook for readings pushed by a real sensor node."""
    return monitor.receive_readings(update)


@app.post("/simulation/start", response_model=DashboardView)
async def start_simulation() -> DashboardView:
    monitor.start_simulation()
    return monitor.dashboard()


@app.post("/simulation/stop", response_model=DashboardView)
async def stop_simulation() -> DashboardView:
    monitor.stop_simulation()
    return monitor.dashboard()


@app.get("/info/{topic}", response_model=InfoMessage)
async def get_info(topic: InfoTopic) -> InfoMessage:
    return info_message(topic)


@app.get("/stream/dashboard")
async def stream_dashboard() -> StreamingResponse:
    """Server-sent events stream of the dashboard after every state change."""

    queue: asyncio.Queue[MonitorState] = asyncio.Queue()
    monitor.store.bind_loop(asyncio.get_running_loop())
    monitor.store.subscribe(queue)

    async def event_generator() -> AsyncIterator[str]:
        try:
            yield f"data: {monitor.dashboard().model_dump_json()}\n\n"

            while True:
                state = await queue.get()
                view = render_dashboard(state, monitor.simulation_running)
                yield f"data: {view.model_dump_json()}\n\n"
        except asyncio.CancelledError:
            logger.debug("Dashboard stream client went away")
            raise
        finally:
            monitor.store.unsubscribe(queue)

    return StreamingResponse(event_generator(), media_type="text/event-stream")
