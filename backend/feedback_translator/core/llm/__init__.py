"""LLM integration package.

This package provides:
- LLMRuntimeConfig: parameters that reach the model call
- LLMGateway: abstract single-call interface (JSON response mode)
- LiteLLMGateway: LiteLLM-backed implementation
"""

from .gateway import LLMGateway, LiteLLMGateway
from .runtime_config import LLMRuntimeConfig

__all__ = [
    "LLMGateway",
    "LiteLLMGateway",
    "LLMRuntimeConfig",
]
