"""
Markov Chatter Service
Main application entry point

Learns a Markov chain from channel lines posted by a chat adapter and answers
with generated lines on command, when addressed, or by chance.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatter.config import settings
from chatter.dependencies import set_chain_service, set_channel_bot
from chatter.services.bot import ChannelBot
from chatter.services.chatter import ChainService
from chatter.services.errors import CorruptModel, OrderMismatch
from chatter.utils.logger import setup_logger

# Setup logging
logger = setup_logger(__name__)


def build_chain_service() -> ChainService:
    """Create the chain service and load the chain file when possible."""
    chain = ChainService.from_settings(settings)
    chain_file = Path(settings.CHAIN_FILE)
    logger.debug(f"[BOOT] Attempting to read chain file at {chain_file}")
    try:
        chain.load(chain_file)
        logger.info(f"[BOOT] Using chain file {chain_file}")
    except FileNotFoundError:
        logger.info(f"[BOOT] No chain file at {chain_file}, one will be created instead")
    except (OrderMismatch, CorruptModel) as e:
        logger.warning(f"[BOOT] Could not read chain file {chain_file}: {e}")
        logger.warning("[BOOT] Starting with an empty chain")
    return chain


def save_chain(chain: ChainService):
    try:
        chain.save(Path(settings.CHAIN_FILE))
    except OSError as e:
        logger.error(f"[ERR] Error writing {settings.CHAIN_FILE}: {e}")


async def periodic_save(chain: ChainService, interval: int):
    """Save the chain every interval seconds until cancelled."""
    logger.debug(f"[SAVE] Saving every {interval}s")
    while True:
        await asyncio.sleep(interval)
        await asyncio.to_thread(save_chain, chain)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for service initialization"""
    logger.info("[BOOT] Starting chatter service...")
    logger.info(f"[BOOT] Chain order: {settings.MARKOV_ORDER}")

    chain = build_chain_service()
    bot = ChannelBot.from_settings(chain, settings)
    set_chain_service(chain)
    set_channel_bot(bot)
    app.state.chain_service = chain
    app.state.channel_bot = bot

    saver = None
    if settings.SAVE_INTERVAL > 0:
        saver = asyncio.create_task(periodic_save(chain, settings.SAVE_INTERVAL))

    logger.info("[BOOT] Chatter service ready!")
    try:
        yield
    finally:
        logger.info("[SHUTDOWN] Saving one last time...")
        if saver is not None:
            saver.cancel()
            try:
                await saver
            except asyncio.CancelledError:
                pass
        save_chain(chain)
        set_chain_service(None)
        set_channel_bot(None)
        logger.info("[SHUTDOWN] Chatter service stopped")


# Create FastAPI app
app = FastAPI(
    title="Markov Chatter Service",
    description="Markov chain chat bot backend",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"[ERR] Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": {
                "code": "CHATTER_SERVICE_ERROR",
                "message": "Internal server error occurred",
                "details": {"type": type(exc).__name__},
            },
        },
    )


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    chain = getattr(app.state, "chain_service", None)
    return {
        "ok": True,
        "data": {
            "status": "healthy",
            "order": settings.MARKOV_ORDER,
            "trained": chain is not None and not chain.is_empty(),
        },
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "markov": "/markov/*",
            "bot": "/bot/*",
        },
    }


from chatter.api.routers import markov_router, bot_router  # noqa: E402

app.include_router(markov_router.router)
app.include_router(bot_router.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chatter.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
