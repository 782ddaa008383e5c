"""
Service instances shared by the API routers.
Set once by the app lifespan; read through FastAPI Depends.
"""
from typing import Optional

from fastapi import HTTPException

from chatter.services.bot import ChannelBot
from chatter.services.chatter import ChainService

_chain_service: Optional[ChainService] = None
_channel_bot: Optional[ChannelBot] = None


def set_chain_service(service: Optional[ChainService]):
    global _chain_service
    _chain_service = service


def set_channel_bot(bot: Optional[ChannelBot]):
    global _channel_bot
    _channel_bot = bot


def get_chain_service() -> ChainService:
    if _chain_service is None:
        raise HTTPException(status_code=503, detail="chain service not initialized")
    return _chain_service


def get_channel_bot() -> ChannelBot:
    if _channel_bot is None:
        raise HTTPException(status_code=503, detail="channel bot not initialized")
    return _channel_bot
