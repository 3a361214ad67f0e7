import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import api_router
from app.core import init_database, settings
from app.core.db import AsyncSessionLocal
from app.core.dependencies import resolve_user_from_token
from app.core.exceptions import AuthenticationError, register_exception_handlers
from app.core.realtime import ConnectionManager
from app.repositories.user_repository import UserRepository

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_database()
    app.state.connection_manager = ConnectionManager()
    logger.info("FitLife API started (payment provider: %s)", settings.PAYMENT_PROVIDER)
    yield
    await app.state.connection_manager.close_all()
    logger.info("FitLife API stopped")


app = FastAPI(title="FitLife - gym management API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix="/api/v1")


@app.get("/api/health")
async def health():
    return {"success": True, "message": "FitLife API is running"}


@app.websocket("/ws")
async def realtime(websocket: WebSocket, token: str = ""):
    """Per-user notification stream; the access token comes in the query string."""
    try:
        async with AsyncSessionLocal() as session:
            user = await resolve_user_from_token(token, UserRepository(session))
            user_id = user.id
    except AuthenticationError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    manager: ConnectionManager = websocket.app.state.connection_manager
    await manager.connect(user_id, websocket)
    try:
        while True:
            # Clients only listen; anything they send is treated as a keepalive
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(user_id, websocket)
