from __future__ import annotations
import asyncio
from loguru import logger
from agents.stock_images import search_images
from shared.http import error, json_body, method_not_allowed, request_method, respond
from shared.log import setup_logging

setup_logging()

def handler(event, _ctx):
    if request_method(event) != "POST":
        return method_not_allowed()
    try:
        keywords = json_body(event).get("keywords")
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            return error("keywords must be a list of strings")
        images = asyncio.run(search_images(keywords))
        return respond({"images": images})
    except Exception as e:
        logger.error("search-images failed: {}", e)
        return error(str(e) or "Failed to search images")
