"""
Nutrition analysis via the LLM.

The model is asked for a JSON object; the object is cut out of the free-text
reply first-brace-to-last-brace. Missing or malformed JSON raises
UpstreamFormatError so no partial data ever reaches the client.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from .errors import UpstreamFormatError, UpstreamError
from ..llm.base import LLMProvider
from ..models.summary import NutritionAnalysis

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

NUTRITION_PROMPT = """Analyze the nutritional content of the following food items and provide a JSON response:

Food items: "{food_text}"

Please provide the following information in JSON format:
{{
  "food_items": [array of identified food items],
  "calories": number,
  "macronutrients": {{
    "protein": grams,
    "carbs": grams,
    "fat": grams,
    "fiber": grams
  }},
  "health_impact": string summary,
  "recommendations": [array of health tips]
}}"""


def build_nutrition_prompt(food_text: str) -> str:
    """Prompt asking the model for a structured nutrition estimate."""
    return NUTRITION_PROMPT.format(food_text=food_text.replace('"', "'"))


def _reject_constant(token: str):
    # NaN, Infinity, -Infinity
    raise UpstreamFormatError(f"Non-finite number '{token}' in upstream response")


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Extract the JSON object embedded in free text.

    Raises:
        UpstreamFormatError: No braces, invalid JSON, or not an object
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise UpstreamFormatError("No JSON found in upstream response")
    try:
        data = json.loads(match.group(0), parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise UpstreamFormatError(f"Invalid JSON in upstream response: {e.msg}") from e
    if not isinstance(data, dict):
        raise UpstreamFormatError("Upstream JSON is not an object")
    return data


def _number(value: Any, field: str) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise UpstreamFormatError(f"Field '{field}' is not numeric")
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            number = math.inf
        if not math.isfinite(number):
            raise UpstreamFormatError(f"Field '{field}' is not finite")
        return number
    if isinstance(value, str):
        # "350 kcal", "12g"
        match = re.search(r"-?\d+(?:\.\d+)?", value)
        if match:
            return float(match.group(0))
    raise UpstreamFormatError(f"Field '{field}' is not numeric: {value!r}")


def _strings(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value]
    raise UpstreamFormatError(f"Expected a list of strings, got {type(value).__name__}")


def to_analysis(data: Dict[str, Any]) -> NutritionAnalysis:
    """Convert the upstream JSON shape into the client-facing NutritionAnalysis."""
    macros = data.get("macronutrients") or {}
    if not isinstance(macros, dict):
        raise UpstreamFormatError("Field 'macronutrients' is not an object")

    return NutritionAnalysis(
        calories=_number(data.get("calories"), "calories"),
        protein=_number(macros.get("protein"), "protein"),
        carbohydrates=_number(macros.get("carbs"), "carbs"),
        fats=_number(macros.get("fat"), "fat"),
        fiber=_number(macros.get("fiber"), "fiber"),
        food_items=_strings(data.get("food_items")),
        health_impact=str(data.get("health_impact") or ""),
        recommendations=_strings(data.get("recommendations")),
    )


def parse_nutrition_response(text: str) -> NutritionAnalysis:
    """Raw LLM text -> NutritionAnalysis, or UpstreamFormatError."""
    return to_analysis(extract_json_object(text))


class NutritionAnalyzer:
    """Runs nutrition-analysis prompts against an LLM provider."""

    def __init__(self, llm_provider: Optional[LLMProvider]):
        self.llm_provider = llm_provider

    async def analyze_text(self, food_text: str) -> NutritionAnalysis:
        """
        Analyze a free-text food description.

        Raises:
            UpstreamError: No provider configured or the call failed
            UpstreamTimeoutError: The call timed out
            UpstreamFormatError: The reply did not contain usable JSON
        """
        if self.llm_provider is None:
            raise UpstreamError("LLM provider not configured")

        text = await self.llm_provider.generate(build_nutrition_prompt(food_text), temperature=0.4)
        try:
            return parse_nutrition_response(text)
        except UpstreamFormatError:
            logger.warning(
                "Nutrition analysis response had no usable JSON",
                extra={"extra_fields": {"response_preview": text[:200]}}
            )
            raise
