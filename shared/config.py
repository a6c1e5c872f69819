from __future__ import annotations
import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

@dataclass(frozen=True)
class Settings:
    stage: str = os.getenv("STAGE", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Gemini (text analysis)
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_api_host: str = os.getenv("GEMINI_API_HOST", "https://generativelanguage.googleapis.com")
    gemini_model_id: str = os.getenv("GEMINI_MODEL_ID", "gemini-2.5-flash-preview-09-2025")

    # Pexels (keyword images)
    pexels_api_key: str = os.getenv("PEXELS_API_KEY", "")
    pexels_api_host: str = os.getenv("PEXELS_API_HOST", "https://api.pexels.com")
    pexels_photo_size: str = os.getenv("PEXELS_PHOTO_SIZE", "medium")

    # Image synthesis: "stability" (REST) or "bedrock"
    image_backend: str = os.getenv("IMAGE_BACKEND", "stability").lower()
    stability_api_key: str = os.getenv("STABILITY_API_KEY", "")
    stability_api_host: str = os.getenv("STABILITY_API_HOST", "https://api.stability.ai")
    stability_engine_id: str = os.getenv("STABILITY_ENGINE_ID", "stable-diffusion-xl-1024-v1-0")
    aws_region: str = os.getenv("AWS_REGION", "us-west-2")
    bedrock_image_model_id: str = os.getenv("BEDROCK_IMAGE_MODEL_ID", "stability.stable-diffusion-xl-v1")
    bedrock_connect_timeout: int = int(os.getenv("BEDROCK_CONNECT_TIMEOUT", "5"))
    bedrock_read_timeout: int = int(os.getenv("BEDROCK_READ_TIMEOUT", "90"))

    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "60"))

    # Orchestrator side
    proxy_url: str = os.getenv("WEAVER_PROXY_URL", "http://localhost:8000")
    proxy_timeout: float = float(os.getenv("WEAVER_PROXY_TIMEOUT", "90"))
    analyze_path: str = os.getenv("WEAVER_ANALYZE_PATH", "/analyze")
    search_images_path: str = os.getenv("WEAVER_SEARCH_IMAGES_PATH", "/search-images")
    synthesize_image_path: str = os.getenv("WEAVER_SYNTHESIZE_IMAGE_PATH", "/synthesize-image")
    synthesis_failure: str = os.getenv("WEAVER_SYNTHESIS_FAILURE", "placeholder").lower()

    @property
    def is_development(self) -> bool:
        return self.stage in ("dev", "local", "development")

settings = Settings()
