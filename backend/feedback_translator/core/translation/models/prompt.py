"""Prompt bundle handed to the gateway.

Generation parameters (temperature, token limit) come from the gateway's
runtime config; a bundle only carries the messages and response format.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

JSON_RESPONSE_FORMAT: Dict[str, Any] = {"type": "json_object"}


class Message(BaseModel):
    """Single message in LLM conversation."""

    role: str = Field(
        ..., description="Message role: 'system', 'user', or 'assistant'"
    )
    content: str = Field(..., description="Message content")


class PromptBundle(BaseModel):
    """Complete prompt package ready for LLM."""

    messages: List[Message] = Field(..., description="Conversation messages")

    # JSON mode unless a caller opts out
    response_format: Optional[Dict[str, Any]] = Field(
        default_factory=lambda: dict(JSON_RESPONSE_FORMAT),
        description="Response format specification",
    )

    @classmethod
    def from_prompt(cls, prompt: str) -> "PromptBundle":
        """Wrap a single fully-rendered prompt as one user message."""
        return cls(messages=[Message(role="user", content=prompt)])

    def to_openai_format(self) -> List[Dict[str, str]]:
        """Convert to OpenAI API message format."""
        return [{"role": m.role, "content": m.content} for m in self.messages]
