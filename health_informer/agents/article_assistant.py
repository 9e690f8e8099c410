"""Single-shot article helpers: structured summary and plain-language rewrite."""
from __future__ import annotations

import json
import re

from pydantic import ValidationError

from health_informer.errors import ParseError
from health_informer.llm_client import LLMClient, client as llm_client
from health_informer.models.schemas import ArticleSummary
from health_informer.services.prompt_store import render_prompt

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def _extract_json_object(raw_text: str) -> dict:
    match = _JSON_OBJECT.search(raw_text)
    candidate = match.group(0) if match else raw_text
    payload = json.loads(candidate)
    if not isinstance(payload, dict):
        raise json.JSONDecodeError("Expected a JSON object", candidate, 0)
    return payload


async def summarize_article(title: str, content: str, llm: LLMClient | None = None) -> ArticleSummary:
    active_llm = llm or llm_client()
    prompt = render_prompt("articles.summarize", title=title, content=content)
    result = await active_llm.invoke(
        [{"role": "user", "content": prompt}],
        caller="articles.summarize",
    )
    try:
        return ArticleSummary.model_validate(_extract_json_object(result.content))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ParseError("Failed to parse AI response") from exc


async def rewrite_article(title: str, content: str, llm: LLMClient | None = None) -> str:
    active_llm = llm or llm_client()
    prompt = render_prompt("articles.rewrite", title=title, content=content)
    result = await active_llm.invoke(
        [{"role": "user", "content": prompt}],
        caller="articles.rewrite",
    )
    return result.content.strip()
