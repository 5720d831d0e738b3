"""Prompt engine for the two translation stages.

Templates use ``{{name}}`` placeholders and fence user-supplied text in
``<section>...</section>`` tags. Placeholders are resolved in a single
pass, so braces inside substituted values are never expanded again;
section tags inside values are escaped so user text cannot close its
own fence and append instructions.
"""

import json
import re
from typing import Any, Dict, Sequence

from ..models.plan import ChangePlanItem

DEFAULT_COMPONENT_NAME = "Unnamed Component"

# Tags used as fences in the templates below
SECTION_TAGS = ("component_code", "client_feedback", "change_plan")

_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")
_SECTION_TAG = re.compile(
    r"<(/?)\s*(" + "|".join(SECTION_TAGS) + r")\s*>", re.IGNORECASE
)
_WHITESPACE = re.compile(r"\s+")


INTERPRETATION_TEMPLATE = """You are a precise code analysis assistant. Your only job is to understand
client feedback about a React component and turn it into an exact implementation plan.

RULES:
1. Restate the client's request literally. Do not embellish, improve or suggest alternatives.
2. Use only values explicitly present in the feedback. If the client says "black",
   use black (#000000 or text-black), not a shade of grey.
3. Do not add design opinions of your own.
4. Respond with a single JSON object in exactly the shape shown below and nothing else.

Component name: {{component_name}}

<component_code>
{{component_code}}
</component_code>

<client_feedback>
{{feedback}}
</client_feedback>

REQUIRED JSON OUTPUT:
{
  "interpretation": "What the client wants, restated in technical terms",
  "reasoning": "Why this exact change addresses the request",
  "change_plan": [
    {
      "element_to_change": "Specific JSX element or CSS class to modify",
      "change_required": "Exact change needed, using the client's values"
    }
  ],
  "confidence": 0.9
}

"confidence" is a number between 0 and 1."""


CODE_GENERATION_TEMPLATE = """You are a surgical code editor. Execute the change plan below with no deviation.

<component_code>
{{component_code}}
</component_code>

<change_plan>
{{change_plan}}
</change_plan>

RULES:
1. Find the exact code snippets that need changing.
2. Make only the changes listed in the plan, using exactly the values it specifies.
3. "before" must match the component code character for character.
4. "after" contains only the planned change.
5. "type" is one of: css, props, structure, animation.
6. Respond with a single JSON object in exactly the shape shown below and nothing else.

REQUIRED JSON OUTPUT:
{
  "actionable_changes": [
    {
      "type": "css",
      "before": "Exact original snippet",
      "after": "Replacement snippet",
      "explanation": "What was changed"
    }
  ],
  "external_dependencies_noted": [],
  "parent_component_changes_noted": []
}"""


PATTERN_TEMPLATE = """Extract the core intent of the client feedback below. Be direct and literal.
If the feedback names specific colors or values, those are the pattern.

<client_feedback>
{{feedback}}
</client_feedback>

Pick one category: Style, Layout, Functionality, Copywriting, UX.
Respond with a single JSON object and nothing else:
{"pattern": "exact intent", "category": "Style"}"""


def sanitize_for_prompt(text: str) -> str:
    """Make text safe to embed inside a template section.

    Section tags are rewritten with ``&lt;``: the model still reads the
    same text, but the fence structure stays intact.
    """
    return _SECTION_TAG.sub(
        lambda m: f"&lt;{m.group(1)}{m.group(2)}>", text.strip()
    )


def sanitize_inline(text: str) -> str:
    """Sanitize a value placed on a single template line."""
    return _WHITESPACE.sub(" ", sanitize_for_prompt(text))


class PromptEngine:
    """Builds fully-rendered prompts for each pipeline stage.

    All methods are pure: same inputs, same prompt.
    """

    @classmethod
    def render(cls, template: str, variables: Dict[str, Any]) -> str:
        """Substitute ``{{name}}`` placeholders in one pass.

        Raises:
            KeyError: If the template references an unknown variable
        """
        return _PLACEHOLDER.sub(lambda m: str(variables[m.group(1)]), template)

    @classmethod
    def build_interpretation_prompt(
        cls,
        component_name: str,
        source_text: str,
        feedback_text: str,
    ) -> str:
        """Stage 1 prompt: feedback + component -> interpretation plan."""
        name = sanitize_inline(component_name or "") or DEFAULT_COMPONENT_NAME
        return cls.render(
            INTERPRETATION_TEMPLATE,
            {
                "component_name": name,
                "component_code": sanitize_for_prompt(source_text),
                "feedback": sanitize_for_prompt(feedback_text),
            },
        )

    @classmethod
    def build_code_generation_prompt(
        cls,
        source_text: str,
        change_plan: Sequence[ChangePlanItem],
    ) -> str:
        """Stage 2 prompt: component + change plan -> code changes.

        The raw feedback is deliberately absent; stage 2 only executes the plan.
        """
        plan_json = json.dumps(
            [item.model_dump() for item in change_plan],
            indent=2,
            ensure_ascii=False,
        )
        return cls.render(
            CODE_GENERATION_TEMPLATE,
            {
                "component_code": sanitize_for_prompt(source_text),
                "change_plan": sanitize_for_prompt(plan_json),
            },
        )

    @classmethod
    def build_pattern_prompt(cls, feedback_text: str) -> str:
        """Prompt for condensing feedback into a categorized pattern."""
        return cls.render(
            PATTERN_TEMPLATE, {"feedback": sanitize_for_prompt(feedback_text)}
        )

