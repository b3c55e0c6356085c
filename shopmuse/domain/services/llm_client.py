# shopmuse/domain/services/llm_client.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Type, TypeVar
import json
import logging
import re
from time import monotonic as _now

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Regex to strip code fences (``` or ```json) from LLM output
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)

def strip_fences(s: str) -> str:
    """Remove ``` or ```json fences the LLM might add."""
    return _CODE_FENCE_RE.sub("", s).strip()

def json_minify(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False, default=str)

def parse_json_as(model: Type[T], text: str) -> T:
    """Parse the LLM JSON output into `model`. Raises ValueError on any issue."""
    try:
        return model.model_validate(json.loads(strip_fences(text)))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid LLM JSON: {e}") from e


class ChatClient:
    """Thin wrapper over chat completions with usage logging and schema retry."""

    def __init__(self, client: AsyncOpenAI, model: str, timeout_s: int = 30):
        self.client = client
        self.model = model
        self.timeout_s = timeout_s

    async def complete(self, messages: List[Dict[str, str]], *, max_tokens: int = 256, json_mode: bool = False) -> str:
        t0 = _now()
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        resp = await self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=0.0,
            timeout=self.timeout_s,
            **kwargs,
        )
        dt = _now() - t0
        u = getattr(resp, "usage", None)
        logger.info(
            "LLM call model=%s duration=%.3fs tokens(prompt=%s, completion=%s)",
            getattr(resp, "model", self.model), dt,
            getattr(u, "prompt_tokens", None), getattr(u, "completion_tokens", None),
        )
        return resp.choices[0].message.content or ""

    async def complete_json(
        self,
        messages: List[Dict[str, str]],
        model: Type[T],
        *,
        max_tokens: int = 512,
        max_retries: int = 1,
    ) -> T:
        """
        Ask for JSON matching `model`. Validate strictly.
        On parse/validation error, retry with the JSON Schema appended.
        """
        schema = model.model_json_schema()
        last_err: Optional[str] = None
        for attempt in range(max_retries + 1):
            content = await self.complete(messages, max_tokens=max_tokens, json_mode=True)
            try:
                return parse_json_as(model, content)
            except ValueError as e:
                last_err = str(e)
                logger.warning("LLM JSON invalid (attempt %s/%s): %s", attempt + 1, max_retries + 1, last_err)
                if attempt == max_retries:
                    raise
                messages = messages + [
                    {"role": "system",
                     "content": "Your previous response did not conform to the required JSON format. "
                                "Return JSON that matches the JSON Schema exactly. No prose, no code fences."},
                    {"role": "user",
                     "content": f"Validation error was:\n{last_err}\n\nJSON Schema:\n{json_minify(schema)}"},
                ]
        raise RuntimeError("Unexpected fall-through in complete_json")
