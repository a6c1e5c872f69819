from __future__ import annotations
import boto3
from botocore.config import Config
from .config import settings

_bedrock = None

def _build_boto_config() -> Config:
    # one attempt per stage; the weaver never retries
    return Config(
        retries={"max_attempts": 1, "mode": "standard"},
        connect_timeout=settings.bedrock_connect_timeout,
        read_timeout=settings.bedrock_read_timeout,
    )

def bedrock_runtime():
    global _bedrock
    if _bedrock is None:
        _bedrock = boto3.client(
            "bedrock-runtime",
            region_name=settings.aws_region,
            config=_build_boto_config(),
        )
    return _bedrock
