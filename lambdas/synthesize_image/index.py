from __future__ import annotations
import asyncio
from loguru import logger
from agents.dream_paint import synthesize_image
from shared.http import error, json_body, method_not_allowed, request_method, respond
from shared.log import setup_logging

setup_logging()

def handler(event, _ctx):
    if request_method(event) != "POST":
        return method_not_allowed()
    try:
        prompt = json_body(event).get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            return error("missing prompt")
        return respond(asyncio.run(synthesize_image(prompt)))
    except Exception as e:
        logger.error("synthesize-image failed: {}", e)
        return error(str(e) or "Failed to generate image")
