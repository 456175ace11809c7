import asyncio
from typing import Any, List, Optional

from langchain_core.messages import AIMessage

from src.search.interpreter import (
    FILTER_FIELDS,
    MAX_TOP_K,
    TOOL_NAME,
    QueryInterpreter,
    VectorQuery,
    build_tool_spec,
    parse_tool_args,
    sanitize_filter,
)


class FakeChatModel:
    """Stands in for a tool-bound chat model."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None) -> None:
        self.response = response
        self.error = error
        self.bound_tools: List[Any] = []
        self.tool_choice: Any = None
        self.prompts: List[Any] = []

    def bind_tools(self, tools, tool_choice=None):
        self.bound_tools = list(tools)
        self.tool_choice = tool_choice
        return self

    async def ainvoke(self, messages):
        self.prompts.append(messages)
        if self.error is not None:
            raise self.error
        return self.response


def _tool_message(args: Any, name: str = TOOL_NAME) -> AIMessage:
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": "call_1"}])


def _interpret(model: FakeChatModel, query: str) -> VectorQuery:
    return asyncio.run(QueryInterpreter(llm=model).interpret(query))


def test_tool_is_bound_and_forced() -> None:
    model = FakeChatModel(response=_tool_message({"query_text": "x"}))
    QueryInterpreter(llm=model)
    assert model.tool_choice == TOOL_NAME
    assert model.bound_tools[0]["function"]["name"] == TOOL_NAME


def test_schema_lists_every_filter_field_and_operator() -> None:
    params = build_tool_spec()["function"]["parameters"]
    assert params["required"] == ["query_text"]
    filter_props = params["properties"]["filter"]["properties"]
    assert set(filter_props) == set(FILTER_FIELDS)
    for field, operators in FILTER_FIELDS.items():
        assert set(filter_props[field]["properties"]) == set(operators)
    assert filter_props["team_size"]["properties"]["$gte"] == {"type": "number"}
    assert filter_props["tags"]["properties"]["$in"]["type"] == "array"


def test_structured_query_from_tool_call() -> None:
    model = FakeChatModel(
        response=_tool_message(
            {
                "query_text": "fintech startups",
                "filter": {"industry": {"$eq": "Fintech"}, "team_size": {"$gte": 20}},
                "top_k": 25,
            }
        )
    )
    result = _interpret(model, "recently funded fintech startups with 20+ people")
    assert result == VectorQuery(
        query_text="fintech startups",
        filter={"industry": {"$eq": "Fintech"}, "team_size": {"$gte": 20}},
        top_k=25,
    )
    system, human = model.prompts[0]
    assert system[0] == "system"
    assert human == ("human", "recently funded fintech startups with 20+ people")


def test_no_tool_call_falls_back_to_raw_query() -> None:
    model = FakeChatModel(response=AIMessage(content="I think you want fintech."))
    assert _interpret(model, "fintech") == VectorQuery(query_text="fintech")


def test_wrong_tool_name_falls_back() -> None:
    model = FakeChatModel(response=_tool_message({"query_text": "x"}, name="something_else"))
    assert _interpret(model, "ai tools") == VectorQuery(query_text="ai tools")


def test_model_error_falls_back() -> None:
    model = FakeChatModel(error=RuntimeError("rate limited"))
    assert _interpret(model, "robotics in Europe") == VectorQuery(query_text="robotics in Europe")


def test_blank_query_text_falls_back() -> None:
    model = FakeChatModel(response=_tool_message({"query_text": "  ", "filter": {"batch": {"$eq": "W24"}}}))
    assert _interpret(model, "W24 companies") == VectorQuery(query_text="W24 companies")


def test_unparseable_string_args_fall_back() -> None:
    assert parse_tool_args("{not json", "raw") == VectorQuery(query_text="raw")
    assert parse_tool_args('{"query_text": "ok"}', "raw") == VectorQuery(query_text="ok")
    assert parse_tool_args(["query_text"], "raw") == VectorQuery(query_text="raw")


def test_top_k_is_validated() -> None:
    assert parse_tool_args({"query_text": "q", "top_k": 0}, "raw").top_k is None
    assert parse_tool_args({"query_text": "q", "top_k": "10"}, "raw").top_k is None
    assert parse_tool_args({"query_text": "q", "top_k": True}, "raw").top_k is None
    assert parse_tool_args({"query_text": "q", "top_k": 10.0}, "raw").top_k == 10
    assert parse_tool_args({"query_text": "q", "top_k": 10**9}, "raw").top_k == MAX_TOP_K


def test_sanitize_filter_drops_unknown_shapes() -> None:
    raw = {
        "industry": {"$in": ["AI", "Fintech"], "$ne": "Crypto"},
        "founded": {"$gte": 2020},
        "batch": {"$in": ["W24"]},
        "team_size": {"$gte": "20", "$lte": 100},
        "isHiring": {"$eq": "yes"},
        "tags": {"$in": ["Hardware", ""]},
        "stage": "Early",
    }
    assert sanitize_filter(raw) == {
        "industry": {"$in": ["AI", "Fintech"]},
        "team_size": {"$lte": 100},
    }
    assert sanitize_filter({"founded": {"$eq": 1}}) is None
    assert sanitize_filter("industry=AI") is None
