from dataclasses import asdict
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from chatter.config import settings
from chatter.dependencies import get_chain_service
from chatter.services.chatter import ChainService
from chatter.services.errors import CorruptModel, EmptyModel, OrderMismatch

router = APIRouter(prefix="/markov", tags=["markov"])


class TrainRequest(BaseModel):
    lines: list[str] = Field(..., min_length=1)


class RespondRequest(BaseModel):
    seed: Optional[str] = None
    max_length: Optional[int] = Field(default=None, ge=0)


@router.post("/train")
def train(req: TrainRequest, chain: ChainService = Depends(get_chain_service)):
    used = chain.train_many(req.lines)
    return {"ok": True, "data": {"trained": used, "skipped": len(req.lines) - used}}


@router.post("/respond")
def respond(req: RespondRequest, chain: ChainService = Depends(get_chain_service)):
    try:
        text = chain.respond(req.seed, req.max_length)
    except EmptyModel as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"ok": True, "data": {"text": text}}


@router.get("/stats")
def stats(chain: ChainService = Depends(get_chain_service)):
    return {"ok": True, "data": asdict(chain.stats())}


@router.post("/save")
def save(chain: ChainService = Depends(get_chain_service)):
    path = Path(settings.CHAIN_FILE)
    chain.save(path)
    return {"ok": True, "data": {"path": str(path)}}


@router.post("/load")
def load(chain: ChainService = Depends(get_chain_service)):
    path = Path(settings.CHAIN_FILE)
    try:
        chain.load(path)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"chain file not found: {path}")
    except OrderMismatch as e:
        raise HTTPException(status_code=409, detail=str(e))
    except CorruptModel as e:
        raise HTTPException(status_code=422, detail=f"corrupt chain file: {e}")
    return {"ok": True, "data": {"path": str(path), **asdict(chain.stats())}}
