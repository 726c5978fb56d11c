from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException
import asyncio
import json
import logging
from collections import deque
from typing import Set
from contextlib import asynccontextmanager

from xbee_io.adapters.sim import SimAdapter
from xbee_io.adapters.serial_port import SerialAdapter
from xbee_io.config import ConfigManager, configure_logging
from xbee_io.constants import EVENT_DATA, EVENT_ERROR, SOURCE_SERIAL
from xbee_io.decoder import decode_frame
from xbee_io.emitter import EventEmitter, CollectingSink
from xbee_io.exceptions import FrameDecodeError
from xbee_io.framer import packet_parser
from xbee_io.reader import ReaderThread
from xbee_io.api import metrics as _metrics_module

logger = logging.getLogger(__name__)

RECENT_FRAMES_MAX = 100


def _open_source(config: ConfigManager):
    """Open the byte source selected by app_settings.source.

    Returns (source, sim); sim is None unless the simulated source is in use,
    since only it accepts bytes through /api/sim/feed.
    """
    if config.app_settings.source == SOURCE_SERIAL:
        source = SerialAdapter.from_settings(config.serial_settings)
        source.open()
        return source, None
    sim = SimAdapter()
    sim.open()
    return sim, sim


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the configured byte source, start its reader thread and the broadcaster task."""
    config = ConfigManager()
    configure_logging(config.app_settings.log_level)
    verify = config.framer_settings.verify_checksum

    # decoded records cross from the reader thread into the event loop here
    frame_queue: asyncio.Queue = asyncio.Queue()
    clients: Set[WebSocket] = set()
    recent: deque = deque(maxlen=RECENT_FRAMES_MAX)
    loop = asyncio.get_running_loop()

    emitter = EventEmitter()

    def _on_data(record):
        item = record.to_dict()
        recent.append(item)
        loop.call_soon_threadsafe(frame_queue.put_nowait, item)

    def _on_error(err):
        logger.info(f"Stream frame rejected: {err}")

    emitter.on(EVENT_DATA, _on_data)
    emitter.on(EVENT_ERROR, _on_error)

    source, sim = _open_source(config)
    reader = ReaderThread(source, packet_parser(verify_checksum=verify), emitter,
                          name=f"{config.app_settings.source}-reader")
    reader.start()

    broadcaster = asyncio.create_task(_broadcaster_task(frame_queue, clients))

    app.state.config = config
    app.state.source = source
    app.state.sim = sim
    app.state.reader = reader
    app.state.frame_queue = frame_queue
    app.state.clients = clients
    app.state.recent = recent
    # /api/ingest has its own framer so frames may span requests
    app.state.ingest_framer = packet_parser(verify_checksum=verify)
    app.state._broadcaster = broadcaster

    try:
        yield
    finally:
        logger.info("Shutting down reader and broadcaster...")
        reader.stop()
        await frame_queue.put(None)
        try:
            await broadcaster
        except Exception as e:
            logger.warning(f"Error awaiting broadcaster task: {e}", exc_info=True)


app = FastAPI(title="XBee Stream Backend", lifespan=lifespan)
app.include_router(_metrics_module.router)


@app.get("/api/health")
def health():
    """Simple health endpoint for smoke tests."""
    return {"status": "ok", "service": "xbee-io-backend", "version": "0.1.0"}


async def _broadcaster_task(frame_queue: asyncio.Queue, clients: Set[WebSocket]):
    """Consume decoded records from frame_queue and broadcast them to clients."""
    while True:
        item = await frame_queue.get()
        if item is None:
            # shutdown signal
            break
        payload = json.dumps(item)
        to_remove = []
        for ws in list(clients):
            try:
                await ws.send_text(payload)
            except Exception as e:
                logger.debug(f"WebSocket send error, removing client: {e}")
                to_remove.append(ws)
        for ws in to_remove:
            clients.discard(ws)


@app.websocket("/ws/frames")
async def websocket_frames(ws: WebSocket):
    """Stream every record decoded from the configured source as JSON text."""
    await ws.accept()
    clients: Set[WebSocket] = app.state.clients
    clients.add(ws)
    try:
        while True:
            try:
                await ws.receive_text()
            except WebSocketDisconnect:
                break
    finally:
        clients.discard(ws)
        logger.debug("WebSocket client disconnected and removed")


def _parse_hex(value, field: str) -> bytes:
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field} is required and must be a hex string")
    try:
        return bytes.fromhex(value.replace(' ', '').replace('-', ''))
    except ValueError as e:
        logger.warning(f"Invalid hex data format: {value[:50]}")
        raise HTTPException(status_code=400, detail=f"{field} must be a valid hex string: {e}")


def _error_dict(err: Exception) -> dict:
    return {"type": type(err).__name__, "message": str(err)}


@app.post("/api/ingest")
async def api_ingest(payload: dict):
    """Feed raw stream bytes through the ingest framer.

    Payload: { "data": "hexstring" }. Returns the records and per-frame errors
    completed by these bytes; partial frames are kept for the next call.
    """
    data = _parse_hex(payload.get("data"), "data")
    sink = CollectingSink()
    app.state.ingest_framer.ingest(sink, data)
    return {
        "frames": [r.to_dict() for r in sink.records],
        "errors": [_error_dict(e) for e in sink.errors],
    }


@app.post("/api/decode")
def api_decode(payload: dict):
    """Decode a single frame payload (no start byte, length or checksum).

    Payload: { "payload": "hexstring" }
    """
    raw = _parse_hex(payload.get("payload"), "payload")
    try:
        record = decode_frame(raw)
    except FrameDecodeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return record.to_dict()


@app.post("/api/sim/feed")
def api_sim_feed(payload: dict):
    """Push raw bytes into the simulated source, as if received from a radio.

    Payload: { "data": "hexstring", "chunk_size": int (optional) }
    """
    data = _parse_hex(payload.get("data"), "data")
    chunk_size = payload.get("chunk_size")
    if chunk_size is not None:
        try:
            chunk_size = int(chunk_size)
        except (ValueError, TypeError):
            raise HTTPException(status_code=400, detail=f"Invalid chunk_size: {chunk_size}")
    sim: SimAdapter = getattr(app.state, "sim", None)
    if sim is None:
        raise HTTPException(status_code=503, detail="Sim adapter not available")
    sim.feed(data, chunk_size=chunk_size)
    return {"status": "ok", "bytes": len(data)}


@app.get("/api/frames")
def api_recent_frames():
    """Return the most recent records decoded from the configured source."""
    return list(getattr(app.state, "recent", []))
