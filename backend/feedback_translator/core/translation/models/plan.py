"""Interpretation plan models (stage 1 output).

The plan is an intermediate value: it drives the code-generation stage
and contributes interpretation, reasoning and confidence to the final
result, but is never persisted on its own.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class ChangePlanItem(BaseModel):
    """One planned edit, described without code."""

    model_config = ConfigDict(strict=True)

    element_to_change: str = Field(
        ..., description="JSX element or CSS class to modify"
    )
    change_required: str = Field(
        ..., description="Exact change needed, using the client's values"
    )


class InterpretationPlan(BaseModel):
    """What the client wants, restated as an ordered change plan."""

    model_config = ConfigDict(strict=True)

    interpretation: str = Field(..., description="Literal restatement of intent")
    reasoning: str = Field(..., description="Why the plan addresses the request")
    change_plan: List[ChangePlanItem] = Field(..., description="Ordered edits")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Model confidence")
