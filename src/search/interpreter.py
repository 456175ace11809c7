"""Natural-language query -> structured vector query, via LLM tool calling.

The chat model is bound to a single forced tool, ``generate_vector_query``.
Its JSON schema is generated from ``FILTER_FIELDS`` and the same table is used
to sanitize whatever arguments come back, so the two cannot drift apart.

``QueryInterpreter.interpret`` never raises: a missing or malformed tool call,
or a failing model call, yields ``VectorQuery(query_text=<raw query>)``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from langchain.chat_models import init_chat_model

from src.vectorstore.embeddings import load_model_config

logger = logging.getLogger(__name__)

TOOL_NAME = "generate_vector_query"

MAX_TOP_K = 1000

# field -> {operator: value type}; value types: string, number, boolean, string[]
FILTER_FIELDS: Dict[str, Dict[str, str]] = {
    "batch": {"$eq": "string"},
    "industry": {"$eq": "string", "$in": "string[]"},
    "location": {"$eq": "string", "$in": "string[]"},
    "regions": {"$in": "string[]"},
    "stage": {"$eq": "string", "$in": "string[]"},
    "team_size": {"$eq": "number", "$gte": "number", "$lte": "number"},
    "tags": {"$in": "string[]"},
    "isHiring": {"$eq": "boolean"},
}

FIELD_DESCRIPTIONS: Dict[str, str] = {
    "batch": "YC batch identifier (e.g. 'W24', 'S23')",
    "industry": "Company industry (e.g. 'Fintech', 'Healthcare')",
    "location": "Company location (e.g. 'London, England, United Kingdom')",
    "regions": "Regions (e.g. ['United Kingdom', 'Europe', 'Remote'])",
    "stage": "Company stage (e.g. 'Early', 'Growth')",
    "team_size": "Number of employees",
    "tags": "Tags (e.g. ['Hard Tech', 'Hardware', 'Robotics'])",
    "isHiring": "Whether the company is hiring",
}

SYSTEM_PROMPT = """You convert natural-language searches over a Y Combinator company database into vector database queries.

Call generate_vector_query with:
- query_text: the core semantic meaning of the request, for embedding. Drop temporal or conditional words such as "recently", "new", "latest"; funding dates are not stored.
- filter: only when the user names concrete attributes. Operators: $eq (exact), $in (any of a list), $gte / $lte (numeric bounds). Several fields are combined with AND.
- top_k: only when the user explicitly asks for a number of results.

Examples:
- "recently funded fintech startups" -> query_text "fintech startups", filter {"industry": {"$eq": "Fintech"}}
- "AI companies from W24" -> query_text "AI companies", filter {"batch": {"$eq": "W24"}}
- "healthcare or fintech startups" -> query_text "healthcare fintech startups", filter {"industry": {"$in": ["Healthcare", "Fintech"]}}
- "companies hiring in London" -> query_text "companies", filter {"location": {"$eq": "London"}, "isHiring": {"$eq": true}}
- "early stage companies with 20+ employees" -> query_text "early stage companies", filter {"stage": {"$eq": "Early"}, "team_size": {"$gte": 20}}
- "hardware companies in Europe" -> query_text "hardware companies", filter {"regions": {"$in": ["Europe"]}, "tags": {"$in": ["Hardware"]}}"""


@dataclass
class VectorQuery:
    query_text: str
    filter: Optional[Dict[str, Dict[str, Any]]] = None
    top_k: Optional[int] = None


def _value_schema(kind: str) -> Dict[str, Any]:
    if kind == "string[]":
        return {"type": "array", "items": {"type": "string"}}
    return {"type": kind}


def _filter_schema() -> Dict[str, Any]:
    properties: Dict[str, Any] = {}
    for field, operators in FILTER_FIELDS.items():
        properties[field] = {
            "type": "object",
            "description": FIELD_DESCRIPTIONS[field],
            "properties": {op: _value_schema(kind) for op, kind in operators.items()},
            "additionalProperties": False,
        }
    return {
        "type": "object",
        "description": "Optional metadata filter: { field: { operator: value } }",
        "properties": properties,
        "additionalProperties": False,
    }


def build_tool_spec() -> Dict[str, Any]:
    """OpenAI-style function tool describing the structured query."""
    return {
        "type": "function",
        "function": {
            "name": TOOL_NAME,
            "description": (
                "Generates a vector database query from a natural-language query: "
                "cleaned text to embed plus an optional metadata filter."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "query_text": {
                        "type": "string",
                        "description": "Cleaned search text optimized for vector similarity. This is embedded.",
                    },
                    "filter": _filter_schema(),
                    "top_k": {
                        "type": "integer",
                        "description": "Result count override (default 100). Only if the user asks for a specific number.",
                    },
                },
                "required": ["query_text"],
            },
        },
    }


def _valid_value(kind: str, value: Any) -> bool:
    if kind == "string":
        return isinstance(value, str) and bool(value.strip())
    if kind == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "string[]":
        return (
            isinstance(value, list)
            and bool(value)
            and all(isinstance(v, str) and v.strip() for v in value)
        )
    return False


def sanitize_filter(raw: Any) -> Optional[Dict[str, Dict[str, Any]]]:
    """Keep only fields, operators and value types declared in FILTER_FIELDS."""
    if not isinstance(raw, dict):
        return None
    clean: Dict[str, Dict[str, Any]] = {}
    for field, condition in raw.items():
        operators = FILTER_FIELDS.get(field)
        if operators is None or not isinstance(condition, dict):
            logger.debug("Dropping unsupported filter field %r", field)
            continue
        kept = {
            op: value
            for op, value in condition.items()
            if op in operators and _valid_value(operators[op], value)
        }
        if kept:
            clean[field] = kept
    return clean or None


def parse_tool_args(args: Any, raw_query: str) -> VectorQuery:
    if isinstance(args, str):
        try:
            args = json.loads(args)
        except json.JSONDecodeError:
            logger.warning("Unparseable tool arguments; using raw query")
            return VectorQuery(query_text=raw_query)
    if not isinstance(args, dict):
        return VectorQuery(query_text=raw_query)

    query_text = args.get("query_text")
    if not isinstance(query_text, str) or not query_text.strip():
        return VectorQuery(query_text=raw_query)

    top_k = args.get("top_k")
    if isinstance(top_k, float) and top_k.is_integer():
        top_k = int(top_k)
    if not isinstance(top_k, int) or isinstance(top_k, bool) or top_k < 1:
        top_k = None
    else:
        top_k = min(top_k, MAX_TOP_K)

    return VectorQuery(
        query_text=query_text.strip(),
        filter=sanitize_filter(args.get("filter")),
        top_k=top_k,
    )


class QueryInterpreter:
    """Turns free text into a VectorQuery with one forced tool call."""

    def __init__(self, llm: Any = None, *, config: Optional[Dict[str, Any]] = None) -> None:
        if llm is None:
            chat_cfg = dict(load_model_config(config).get("chat_model") or {})
            model = chat_cfg.pop("model", "gpt-4o-mini")
            provider = chat_cfg.pop("provider", "openai")
            logger.info("Initializing query interpreter provider=%s model=%s", provider, model)
            llm = init_chat_model(model, model_provider=provider, **chat_cfg)
        self._llm = llm.bind_tools([build_tool_spec()], tool_choice=TOOL_NAME)

    async def interpret(self, query: str) -> VectorQuery:
        try:
            message = await self._llm.ainvoke(
                [("system", SYSTEM_PROMPT), ("human", query)]
            )
        except Exception as e:
            logger.warning("Query interpretation failed, using raw query: %s", e)
            return VectorQuery(query_text=query)

        tool_calls: List[Dict[str, Any]] = list(getattr(message, "tool_calls", None) or [])
        call = tool_calls[0] if tool_calls else None
        if not call or call.get("name") != TOOL_NAME:
            logger.warning("No %s tool call in model response; using raw query", TOOL_NAME)
            return VectorQuery(query_text=query)

        result = parse_tool_args(call.get("args"), query)
        logger.debug("Interpreted %r -> %r", query, result)
        return result
