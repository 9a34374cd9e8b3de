from .conversation import ConversationMessage, ConversationRecord
from .rpc import (
    InitializeResult,
    RpcError,
    RpcRequest,
    RpcResponse,
    ServerMetadata,
    TextContent,
    ToolCallParams,
    ToolCallResult,
    ToolDescriptor,
    ToolsListResult,
)

__all__ = [
    "ConversationMessage",
    "ConversationRecord",
    "InitializeResult",
    "RpcError",
    "RpcRequest",
    "RpcResponse",
    "ServerMetadata",
    "TextContent",
    "ToolCallParams",
    "ToolCallResult",
    "ToolDescriptor",
    "ToolsListResult",
]
