"""ansi16 FastAPI server — 16-color ANSI downsampling over HTTP."""

from __future__ import annotations

import hashlib
import logging
import os
import socket
import time
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from ansi_parser import MalformedEscapeError, parse
from ansi_writer import serialize
from downsample import downsample_document

TOKEN = os.environ.get("ANSI16_TOKEN", "").strip()
MAX_INPUT_CHARS = int(os.environ.get("ANSI16_MAX_INPUT_CHARS", "1000000"))
RATE_LIMIT = int(os.environ.get("ANSI16_RATE_LIMIT", "50"))
HOST = os.environ.get("ANSI16_HOST", "127.0.0.1")
PORT = int(os.environ.get("ANSI16_PORT", "8787"))
LOG_LEVEL = os.environ.get("ANSI16_LOG_LEVEL", "INFO").upper()

logger = logging.getLogger("ansi16.server")

app = FastAPI(title="ansi16", version="1.0.0")
_security = HTTPBearer(auto_error=False)


def _verify(creds: Optional[HTTPAuthorizationCredentials] = Depends(_security)) -> None:
    if not TOKEN:
        return
    if creds is None or creds.credentials != TOKEN:
        raise HTTPException(status_code=401, detail="Invalid token")


class DownsampleRequest(BaseModel):
    text: str
    errors: Literal["strict", "skip"] = "strict"


class _RateLimiter:
    """Simple in-memory sliding-window rate limiter."""

    def __init__(self, max_per_sec: int = 20):
        self._max = max_per_sec
        self._timestamps: list[float] = []

    def check(self) -> None:
        now = time.monotonic()
        self._timestamps = [t for t in self._timestamps if now - t < 1.0]
        if len(self._timestamps) >= self._max:
            raise HTTPException(status_code=429, detail="Rate limit exceeded")
        self._timestamps.append(now)


_downsample_limiter = _RateLimiter(max_per_sec=RATE_LIMIT)


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "hostname": socket.gethostname(),
        "auth": bool(TOKEN),
    }


@app.post("/downsample")
async def post_downsample(
    body: DownsampleRequest,
    _: None = Depends(_verify),
):
    _downsample_limiter.check()
    if len(body.text) > MAX_INPUT_CHARS:
        raise HTTPException(status_code=413, detail=f"Text exceeds {MAX_INPUT_CHARS} characters")

    try:
        doc = parse(body.text, errors=body.errors)
    except MalformedEscapeError as exc:
        logger.info("Rejected malformed input: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    output = serialize(downsample_document(doc))
    return {
        "output": output,
        "cells": len(doc),
        "hash": hashlib.sha256(output.encode()).hexdigest()[:16],
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=HOST, port=PORT)
