from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

JSONRPC_VERSION = "2.0"

# JSON-RPC 2.0 error codes
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = Union[int, str]


class RpcRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = Field(default=JSONRPC_VERSION)
    id: Optional[RequestId] = None
    method: str = Field(..., min_length=1)
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class RpcError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class RpcResponse(BaseModel):
    jsonrpc: str = Field(default=JSONRPC_VERSION)
    id: Optional[RequestId] = None
    result: Optional[Any] = None
    error: Optional[RpcError] = None

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.model_dump(exclude_none=True)
        else:
            payload["result"] = self.result
        return payload


class ServerMetadata(BaseModel):
    name: str
    version: str
    description: str


class InitializeResult(BaseModel):
    capabilities: List[str] = Field(default_factory=list)
    metadata: ServerMetadata


class ToolDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(alias="inputSchema")


class ToolsListResult(BaseModel):
    tools: List[ToolDescriptor] = Field(default_factory=list)


class ToolCallParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    arguments: Dict[str, Any] = Field(default_factory=dict)


class TextContent(BaseModel):
    type: str = "text"
    text: str


class ToolCallResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: List[TextContent] = Field(default_factory=list)
    is_error: bool = Field(default=False, alias="isError")


__all__ = [
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "JSONRPC_VERSION",
    "InitializeResult",
    "RequestId",
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
