"""Service layer components."""

from .history import HistoryReader, HistoryWriter
from .poller import ConversationPoller, PollerState
from .store_reader import ConversationBatch, ConversationStoreReader, QueryFailure, StoreUnavailable
from .tools import UnknownToolError, call_tool, get_tool_schemas
from .watermark import Watermark


__all__ = [
    "ConversationBatch",
    "ConversationPoller",
    "ConversationStoreReader",
    "HistoryReader",
    "HistoryWriter",
    "PollerState",
    "QueryFailure",
    "StoreUnavailable",
    "UnknownToolError",
    "Watermark",
    "call_tool",
    "get_tool_schemas",
]
