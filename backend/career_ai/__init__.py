"""Local Llama orchestration for CV analysis and interview practice."""

from .config import LlamaSettings, get_settings
from .llama_service import LlamaService, get_llama_service

__all__ = ["LlamaSettings", "get_settings", "LlamaService", "get_llama_service"]
