"""
Channel bot endpoints.
The chat adapter posts every channel line here and sends back any reply.
"""
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chatter.dependencies import get_channel_bot
from chatter.services.bot import ChannelBot

router = APIRouter(prefix="/bot", tags=["bot"])


class MessageRequest(BaseModel):
    sender: str
    channel: str
    text: str


@router.post("/message")
def message(req: MessageRequest, bot: ChannelBot = Depends(get_channel_bot)):
    reply = bot.handle(req.sender, req.channel, req.text)
    return {"ok": True, "data": {"reply": reply}}


@router.get("/ignored")
def ignored(bot: ChannelBot = Depends(get_channel_bot)):
    return {"ok": True, "data": {"ignored": bot.ignored_senders()}}
