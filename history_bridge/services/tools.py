"""Tool definitions advertised to the host process."""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from ..logging_config import logger
from ..models import TextContent, ToolCallResult, ToolDescriptor
from .history import HistoryReader


DEFAULT_LOOKBACK_DAYS = 7


class UnknownToolError(LookupError):
    """Raised when a tool call names a tool this bridge does not expose."""


# Tool schemas for tools/list
TOOL_SCHEMAS: List[Dict[str, Any]] = [
    {
        "name": "get_recent_history",
        "description": "Retrieve recent conversation history",
        "inputSchema": {
            "type": "object",
            "properties": {
                "days": {
                    "type": "number",
                    "description": "Number of days to look back",
                    "default": DEFAULT_LOOKBACK_DAYS,
                },
            },
        },
    },
]


def get_tool_schemas() -> List[ToolDescriptor]:
    return [ToolDescriptor.model_validate(schema) for schema in TOOL_SCHEMAS]


def _coerce_days(raw: Any) -> int:
    if raw is None:
        return DEFAULT_LOOKBACK_DAYS
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError("days must be a number")
    if isinstance(raw, float) and not raw.is_integer():
        raise ValueError("days must be a whole number")
    days = int(raw)
    if days < 1:
        raise ValueError("days must be at least 1")
    return days


def _text_result(text: str, *, is_error: bool = False) -> ToolCallResult:
    return ToolCallResult(content=[TextContent(text=text)], is_error=is_error)


def _get_recent_history(arguments: Dict[str, Any], reader: HistoryReader) -> ToolCallResult:
    try:
        days = _coerce_days(arguments.get("days"))
    except ValueError as exc:
        return _text_result(str(exc), is_error=True)

    transcript = reader.load_recent(days)
    if not transcript:
        return _text_result(f"No conversation history in the last {days} day(s).")
    return _text_result(transcript)


_TOOL_HANDLERS: Dict[str, Callable[[Dict[str, Any], HistoryReader], ToolCallResult]] = {
    "get_recent_history": _get_recent_history,
}


def call_tool(name: str, arguments: Dict[str, Any], reader: HistoryReader) -> ToolCallResult:
    handler = _TOOL_HANDLERS.get(name)
    if handler is None:
        raise UnknownToolError(name)
    logger.info("Executing tool", extra={"tool": name})
    return handler(arguments, reader)


__all__ = [
    "DEFAULT_LOOKBACK_DAYS",
    "TOOL_SCHEMAS",
    "UnknownToolError",
    "call_tool",
    "get_tool_schemas",
]
