"""Line-delimited JSON-RPC dispatcher spoken over stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..config import Settings
from ..logging_config import logger
from ..models import (
    InitializeResult,
    RpcError,
    RpcRequest,
    RpcResponse,
    ServerMetadata,
    ToolCallParams,
    ToolsListResult,
)
from ..models.rpc import INTERNAL_ERROR, INVALID_PARAMS
from ..services import ConversationPoller, HistoryReader, UnknownToolError, call_tool, get_tool_schemas


CAPABILITIES: List[str] = ["history-tracking"]

Handler = Callable[[RpcRequest], Awaitable[Any]]
LineWriter = Callable[[str], None]


class ProtocolError(Exception):
    """Request was understood but cannot be served; reported as a JSON-RPC error."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def encode_response(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False) + "\n"


def write_stdout(line: str) -> None:
    sys.stdout.write(line)
    sys.stdout.flush()


class ProtocolDispatcher:
    """Maps incoming requests to handlers and builds responses.

    ``initialize`` starts the poller but only schedules its task, so the reply
    is produced before any poll tick runs. Unrecognised methods get no reply.
    """

    def __init__(
        self,
        poller: ConversationPoller,
        history_reader: HistoryReader,
        metadata: ServerMetadata,
    ) -> None:
        self._poller = poller
        self._history_reader = history_reader
        self._metadata = metadata
        self._handlers: Dict[str, Handler] = {
            "initialize": self._handle_initialize,
            "tools/list": self._handle_tools_list,
            "tools/call": self._handle_tools_call,
        }

    @classmethod
    def from_settings(
        cls, settings: Settings, poller: ConversationPoller, history_reader: HistoryReader
    ) -> "ProtocolDispatcher":
        metadata = ServerMetadata(
            name=settings.app_name,
            version=settings.app_version,
            description=settings.app_description,
        )
        return cls(poller, history_reader, metadata)

    @property
    def poller(self) -> ConversationPoller:
        return self._poller

    @property
    def methods(self) -> List[str]:
        return list(self._handlers)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------
    async def _handle_initialize(self, request: RpcRequest) -> Dict[str, Any]:
        logger.info("Initializing history bridge")
        await self._poller.start()
        result = InitializeResult(capabilities=list(CAPABILITIES), metadata=self._metadata)
        logger.info("History bridge initialized")
        return result.model_dump()

    async def _handle_tools_list(self, request: RpcRequest) -> Dict[str, Any]:
        return ToolsListResult(tools=get_tool_schemas()).model_dump(by_alias=True)

    async def _handle_tools_call(self, request: RpcRequest) -> Dict[str, Any]:
        try:
            params = ToolCallParams.model_validate(request.params or {})
        except ValidationError as exc:
            raise ProtocolError(INVALID_PARAMS, "Invalid tool call parameters") from exc
        try:
            result = call_tool(params.name, params.arguments, self._history_reader)
        except UnknownToolError as exc:
            raise ProtocolError(INVALID_PARAMS, f"Unknown tool: {params.name}") from exc
        return result.model_dump(by_alias=True)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def _parse(self, line: str) -> Optional[RpcRequest]:
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Error parsing request", extra={"error": str(exc)})
            return None
        if not isinstance(payload, dict):
            logger.warning("Ignoring non-object request", extra={"type": type(payload).__name__})
            return None
        try:
            return RpcRequest.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Invalid request envelope", extra={"error": str(exc)})
            return None

    async def handle_line(self, line: str) -> Optional[Dict[str, Any]]:
        """Handle one raw request line; returns the response payload, if any."""
        stripped = line.strip()
        if not stripped:
            return None

        request = self._parse(stripped)
        if request is None:
            return None

        handler = self._handlers.get(request.method)
        if handler is None:
            logger.debug("Ignoring unsupported method", extra={"method": request.method})
            return None

        try:
            result = await handler(request)
        except ProtocolError as exc:
            logger.warning(
                "Request rejected",
                extra={"method": request.method, "code": exc.code, "error": exc.message},
            )
            response = RpcResponse(id=request.id, error=RpcError(code=exc.code, message=exc.message))
        except Exception:
            logger.exception("Error handling request", extra={"method": request.method})
            response = RpcResponse(
                id=request.id, error=RpcError(code=INTERNAL_ERROR, message="Internal error")
            )
        else:
            response = RpcResponse(id=request.id, result=result)

        if request.is_notification:
            return None
        return response.as_payload()

    async def serve(self, reader: asyncio.StreamReader, write: LineWriter = write_stdout) -> None:
        """Read requests until EOF, writing one JSON response per line."""
        while True:
            try:
                raw = await reader.readline()
            except ValueError as exc:
                logger.warning("Discarding oversized request", extra={"error": str(exc)})
                continue
            if not raw:
                logger.info("stdin closed")
                return
            response = await self.handle_line(raw.decode("utf-8", errors="replace"))
            if response is not None:
                write(encode_response(response))


__all__ = ["CAPABILITIES", "ProtocolDispatcher", "ProtocolError", "encode_response", "write_stdout"]
