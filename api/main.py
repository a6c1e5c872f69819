from __future__ import annotations
from typing import List
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field, field_validator
from shared.config import settings
from shared.errors import DreamscapeError
from shared.log import setup_logging
from agents.dream_analyze import analyze_dream
from agents.stock_images import search_images
from agents.dream_paint import synthesize_image

setup_logging()

app = FastAPI(title="Dreamscape Weaver Proxy", version="1.0.0")


class PromptRequest(BaseModel):
    prompt: str = Field(..., min_length=1)

    @field_validator("prompt")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("missing prompt")
        return v


class KeywordsRequest(BaseModel):
    keywords: List[str]


@app.exception_handler(RequestValidationError)
async def _invalid_body(_: Request, exc: RequestValidationError):
    # the proxy contract has a single failure status
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return JSONResponse(status_code=500, content={"error": f"Invalid request body: {where or 'body'} {first.get('msg', '')}".strip()})


@app.exception_handler(DreamscapeError)
async def _dreamscape_error(request: Request, exc: DreamscapeError):
    logger.error("{} failed: {}", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception):
    logger.exception("{} crashed", request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Internal server error"})


@app.get("/ping")
def ping():
    return {
        "ok": True,
        "stage": settings.stage,
        "text_model": settings.gemini_model_id,
        "image_backend": settings.image_backend,
        "credentials": {
            "gemini": bool(settings.gemini_api_key),
            "pexels": bool(settings.pexels_api_key),
            "stability": bool(settings.stability_api_key),
        },
    }


@app.post("/analyze")
async def analyze(req: PromptRequest):
    """Relay the analysis prompt to the text model and return its JSON verbatim."""
    return await analyze_dream(req.prompt)


@app.post("/search-images")
async def search(req: KeywordsRequest):
    return {"images": await search_images(req.keywords)}


@app.post("/synthesize-image")
async def synthesize(req: PromptRequest):
    return await synthesize_image(req.prompt)
