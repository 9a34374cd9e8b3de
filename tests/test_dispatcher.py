"""Tests for the JSON-RPC stdio dispatcher."""

import asyncio
import json
import logging

import pytest

from history_bridge.models import ServerMetadata
from history_bridge.protocol import ProtocolDispatcher, encode_response
from history_bridge.services import (
    ConversationBatch,
    ConversationPoller,
    HistoryReader,
    HistoryWriter,
    PollerState,
    Watermark,
)
from history_bridge.utils import utc_now


class CountingReader:
    """Stand-in store reader that records how often it was queried."""

    def __init__(self):
        self.opened = 0
        self.queries = 0
        self.closed = False
        self.is_open = False

    def open(self):
        self.opened += 1
        self.is_open = True

    def close(self):
        self.closed = True
        self.is_open = False

    def query(self, since):
        self.queries += 1
        return ConversationBatch()


@pytest.fixture
def store():
    return CountingReader()


@pytest.fixture
def dispatcher(store, history_dir, epoch):
    poller = ConversationPoller(store, HistoryWriter(history_dir), watermark=Watermark(epoch), poll_interval_seconds=0)
    metadata = ServerMetadata(
        name="PAI History", version="1.0.0", description="Automatic conversation history tracking"
    )
    return ProtocolDispatcher(poller, HistoryReader(history_dir), metadata)


def _request(method, request_id=1, **extra):
    return json.dumps({"jsonrpc": "2.0", "id": request_id, "method": method, **extra})


async def _serve(dispatcher, lines):
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data(line.encode("utf-8") + b"\n")
    reader.feed_eof()
    output = []
    await dispatcher.serve(reader, output.append)
    await dispatcher.poller.stop()
    return [json.loads(line) for line in output]


class TestToolsList:
    def test_example_response(self, dispatcher):
        response = asyncio.run(dispatcher.handle_line('{"jsonrpc":"2.0","id":1,"method":"tools/list"}'))

        assert response["jsonrpc"] == "2.0"
        assert response["id"] == 1
        (tool,) = response["result"]["tools"]
        assert tool["name"] == "get_recent_history"
        assert tool["description"] == "Retrieve recent conversation history"
        assert tool["inputSchema"]["properties"]["days"] == {
            "type": "number",
            "description": "Number of days to look back",
            "default": 7,
        }

    def test_encoded_line_is_compact(self, dispatcher):
        response = asyncio.run(dispatcher.handle_line(_request("tools/list")))

        line = encode_response(response)
        assert line.startswith('{"jsonrpc":"2.0","id":1,"result":{"tools":[{"name":"get_recent_history"')
        assert line.endswith("\n")
        assert line.count("\n") == 1


class TestInitialize:
    def test_reply_precedes_polling(self, dispatcher, store):
        async def scenario():
            response = await dispatcher.handle_line(_request("initialize", request_id="init-7"))
            queries_at_reply = store.queries
            await dispatcher.poller.stop()
            return response, queries_at_reply

        response, queries_at_reply = asyncio.run(scenario())

        assert response["id"] == "init-7"
        assert queries_at_reply == 0
        assert response["result"] == {
            "capabilities": ["history-tracking"],
            "metadata": {
                "name": "PAI History",
                "version": "1.0.0",
                "description": "Automatic conversation history tracking",
            },
        }

    def test_activates_poller(self, dispatcher, store):
        async def scenario():
            await dispatcher.handle_line(_request("initialize"))
            state = dispatcher.poller.state
            running = dispatcher.poller.is_running
            await dispatcher.poller.stop()
            return state, running

        state, running = asyncio.run(scenario())

        assert state is PollerState.ACTIVE
        assert running
        assert store.opened == 1
        assert store.closed

    def test_exactly_one_response(self, dispatcher):
        responses = asyncio.run(_serve(dispatcher, [_request("initialize", request_id=5)]))

        assert [r["id"] for r in responses] == [5]


class TestRobustness:
    def test_malformed_then_valid(self, dispatcher, caplog):
        with caplog.at_level(logging.WARNING, logger="history_bridge"):
            responses = asyncio.run(_serve(dispatcher, ["{not json", _request("tools/list", request_id=2)]))

        assert [r["id"] for r in responses] == [2]
        assert any("Error parsing request" in record.getMessage() for record in caplog.records)

    def test_unknown_method_ignored(self, dispatcher):
        responses = asyncio.run(_serve(dispatcher, [_request("resources/list"), _request("tools/list", request_id=3)]))

        assert [r["id"] for r in responses] == [3]

    def test_notification_gets_no_reply(self, dispatcher):
        line = json.dumps({"jsonrpc": "2.0", "method": "tools/list"})

        assert asyncio.run(dispatcher.handle_line(line)) is None

    def test_non_object_and_blank_lines_ignored(self, dispatcher):
        responses = asyncio.run(_serve(dispatcher, ["[1, 2]", "", "   ", _request("tools/list", request_id=4)]))

        assert [r["id"] for r in responses] == [4]


class TestToolsCall:
    def test_get_recent_history(self, dispatcher, history_dir):
        history_dir.mkdir(parents=True)
        (history_dir / f"{utc_now().date().isoformat()}.md").write_text("## entry\n", encoding="utf-8")
        line = _request("tools/call", params={"name": "get_recent_history", "arguments": {"days": 1}})

        response = asyncio.run(dispatcher.handle_line(line))

        assert response["result"]["isError"] is False
        assert "## entry" in response["result"]["content"][0]["text"]

    def test_unknown_tool_is_invalid_params(self, dispatcher):
        line = _request("tools/call", params={"name": "nope"})

        response = asyncio.run(dispatcher.handle_line(line))

        assert response["error"]["code"] == -32602
        assert "result" not in response

    def test_missing_name_is_invalid_params(self, dispatcher):
        response = asyncio.run(dispatcher.handle_line(_request("tools/call", params={})))

        assert response["error"]["code"] == -32602
