"""Model call result, independent of the provider behind the gateway."""

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    """Tokens billed for one call, as reported by the provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(BaseModel):
    """Raw text returned by one model call, plus call metadata for logging."""

    content: str = Field(..., description="Unvalidated model output")
    provider: str
    model: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    latency_ms: int = 0
