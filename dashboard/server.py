# dashboard/server.py
"""
FastAPI server exposing the simulator to a visualization front end.

HTTP endpoints start/stop runs, report status and manage recordings; every
tick's batch is pushed to WebSocket clients on ``/ws/adsb``. Batches are
produced on the simulator's tick thread and handed to the event loop with
``asyncio.run_coroutine_threadsafe``.
"""
import asyncio
import json
import logging
import os
import sys
from typing import Dict, List, Optional

# Ensure the parent directory is in the path for module imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn
from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from adsb.errors import PopulationBusyError, SimulationAlreadyRunningError
from config_loader import CONFIG, LOG_DIR, ConfigError
from logger_config import setup_logging
from simulation.host import SimulatorHost
from simulation.recorder import list_recordings
from simulation.runner import BATCH_EVENT
from utils.storage import rel_to_logs_url

logger = logging.getLogger(__name__)

app = FastAPI()
app.mount("/logs", StaticFiles(directory=LOG_DIR), name="logs")

NO_STORE = {"Cache-Control": "no-store"}


# --- WebSocket Connection Manager ---
class ConnectionManager:
    """Tracks active WebSocket clients and broadcasts batches to them."""
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        try:
            self.active_connections.remove(websocket)
        except ValueError:
            pass

    async def broadcast(self, data: Dict):
        """
        Send a JSON-serializable payload to all connected clients.

        Exceptions during send are logged and the offending connection is pruned.
        """
        message = json.dumps(data)
        connections_to_check = self.active_connections[:]
        results = await asyncio.gather(
            *(connection.send_text(message) for connection in connections_to_check),
            return_exceptions=True)

        for connection, result in zip(connections_to_check, results):
            if isinstance(result, Exception):
                logger.warning(f"WebSocket send failed (client disconnect/error): {result}")
                self.disconnect(connection)

manager = ConnectionManager()


class BatchBroadcaster:
    """Runner sink forwarding each batch from the tick thread to the event loop."""

    def __init__(self, connection_manager: ConnectionManager):
        self.manager = connection_manager
        self.loop: Optional[asyncio.AbstractEventLoop] = None

    def on_batch(self, batch):
        loop = self.loop
        if loop is None or loop.is_closed() or not self.manager.active_connections:
            return
        payload = {"event": BATCH_EVENT, "payload": batch.to_dict()}
        asyncio.run_coroutine_threadsafe(self.manager.broadcast(payload), loop)

broadcaster = BatchBroadcaster(manager)

_HOST: Optional[SimulatorHost] = None


def attach_host(host: SimulatorHost) -> SimulatorHost:
    """Binds the server to ``host`` and registers the WebSocket sink on its runner."""
    global _HOST
    if _HOST is not None:
        _HOST.runner.remove_sink(broadcaster.on_batch)
    _HOST = host
    host.runner.add_sink(broadcaster.on_batch)
    return host


def get_host() -> SimulatorHost:
    if _HOST is None:
        attach_host(SimulatorHost())
    return _HOST


async def _read_optional_json(request: Request) -> Optional[Dict]:
    body = await request.body()
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid JSON body: {e}")


@app.on_event("startup")
async def startup_event():
    """Captures the running loop so tick-thread batches can be scheduled onto it."""
    broadcaster.loop = asyncio.get_running_loop()
    get_host()
    logger.info("Dashboard ready; pushing batches on /ws/adsb.")


# --- FastAPI Endpoints ---

@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "clients": len(manager.active_connections)}


@app.get("/api/simulation/status")
async def api_simulation_status():
    host = get_host()
    try:
        status = await asyncio.to_thread(host.runner.status)
    except PopulationBusyError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return JSONResponse(content=status, headers=NO_STORE)


@app.post("/api/simulation/start")
async def api_simulation_start(request: Request):
    """Starts a run; the optional JSON body overrides the configured center/count/interval."""
    params = await _read_optional_json(request)
    host = get_host()
    try:
        message = await asyncio.to_thread(host.start_simulation, params)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SimulationAlreadyRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PopulationBusyError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"message": message}


@app.post("/api/simulation/stop")
async def api_simulation_stop():
    host = get_host()
    message = await asyncio.to_thread(host.stop_simulation)
    return {"message": message}


@app.get("/api/aircraft")
async def api_aircraft():
    host = get_host()
    try:
        aircraft = await asyncio.to_thread(host.runner.get_aircraft)
    except PopulationBusyError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return JSONResponse(content=aircraft, headers=NO_STORE)


@app.post("/api/recording/start")
async def api_recording_start(request: Request):
    params = await _read_optional_json(request) or {}
    if not isinstance(params, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    zoom = params.get("zoom")
    if zoom is not None and (isinstance(zoom, bool) or not isinstance(zoom, int)):
        raise HTTPException(status_code=400, detail=f"'zoom' must be an integer, got {zoom!r}")
    host = get_host()
    try:
        await asyncio.to_thread(host.start_recording, zoom)
    except PopulationBusyError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return host.recorder.get_status()


@app.post("/api/recording/stop")
async def api_recording_stop():
    """Stops recording and saves the session; 404 when nothing was being recorded."""
    host = get_host()
    result = await asyncio.to_thread(host.stop_recording, True)
    if result is None:
        raise HTTPException(status_code=404, detail="Not currently recording")
    if not result["path"]:
        raise HTTPException(status_code=500, detail="Recording could not be saved")
    session = result["session"]
    return {
        "path": result["path"],
        "url": rel_to_logs_url(result["path"]),
        "duration": session["duration"],
        "eventCount": len(session["events"]),
    }


@app.get("/api/recordings")
async def api_recordings():
    names = await asyncio.to_thread(list_recordings)
    return JSONResponse(content={"items": names}, headers=NO_STORE)


# --- WebSocket Endpoint ---

@app.websocket("/ws/adsb")
async def websocket_endpoint(websocket: WebSocket):
    """Pushes every batch; sends the current aircraft list on connect."""
    await manager.connect(websocket)
    try:
        aircraft = await asyncio.to_thread(get_host().runner.get_aircraft)
        await websocket.send_text(json.dumps({"event": "aircraft", "payload": aircraft}))

        # Keep connection alive, waiting for client disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected.")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        manager.disconnect(websocket)


def serve(host: Optional[SimulatorHost] = None):
    """Runs the dashboard with uvicorn in the current thread."""
    if host is not None:
        attach_host(host)
    dash_cfg = CONFIG.get('dashboard', {})
    bind_host = dash_cfg.get('host', '0.0.0.0')
    port = int(dash_cfg.get('port', 8000))
    logger.info(f"Starting dashboard server at http://{bind_host}:{port}...")
    uvicorn.run(app, host=bind_host, port=port, log_config=None)


# --- Main execution block ---
if __name__ == "__main__":
    setup_logging()
    serve()
