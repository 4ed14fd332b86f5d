from .client import GeminiClient, build_endpoint, normalize_api_base
from .response import strip_code_fences

__all__ = [
    "GeminiClient",
    "build_endpoint",
    "normalize_api_base",
    "strip_code_fences",
]
