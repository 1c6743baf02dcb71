"""
HTTP / WebSocket 接口测试
"""

import asyncio
import logging

import pytest
from fastapi.testclient import TestClient

from compute_worker.api.app import create_app
from compute_worker.api.routes.worker import _stop_sender


@pytest.fixture
def client():
    with TestClient(create_app()) as client:
        yield client


class TestHealth:
    """测试健康检查"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.json() == {"status": "ready", "connections": 0, "activeTasks": 0}

    def test_live(self, client):
        assert client.get("/health/live").status_code == 200

    def test_root_lists_commands(self, client):
        body = client.get("/").json()
        assert "sortArray" in body["supportedCommands"]


class TestTasksEndpoint:
    """测试 POST /tasks"""

    def test_calculate(self, client):
        response = client.post("/tasks", json={
            "id": "t1", "command": "calculate", "data": {"operation": "sum", "numbers": [1, 2, 3]},
        })
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["status"] == "success"
        assert body[0]["result"] == 6

    def test_simulation_waits_for_completion(self, client):
        response = client.post("/tasks", json={
            "id": "s1", "command": "simulateWork", "data": {"duration": 10, "steps": 2},
        })
        body = response.json()
        assert [m["status"] for m in body] == ["progress", "progress", "success"]

    def test_unknown_command(self, client):
        body = client.post("/tasks", json={"id": "x", "command": "bogus"}).json()
        assert len(body) == 1
        assert body[0]["errorType"] == "UnknownCommand"

    def test_generated_id(self, client):
        body = client.post("/tasks", json={"command": "fibonacci", "data": {"n": 3}}).json()
        assert body[0]["id"]
        assert body[0]["nthValue"] == 2

    def test_missing_command_is_validation_error(self, client):
        assert client.post("/tasks", json={"id": "x"}).status_code == 422


class TestWebSocket:
    """测试 /ws 消息通道"""

    def test_ready_and_round_trip(self, client):
        with client.websocket_connect("/ws") as websocket:
            ready = websocket.receive_json()
            assert ready["status"] == "ready"
            assert ready["id"] == "ready-token"

            websocket.send_json({"id": "p", "command": "primeNumbers", "data": {"limit": 10}})
            message = websocket.receive_json()
            assert message["id"] == "p"
            assert message["result"] == [2, 3, 5, 7]

    def test_progress_then_terminal(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_json({"id": "s", "command": "simulateWork", "data": {"duration": 10, "steps": 2}})

            statuses = [websocket.receive_json()["status"] for _ in range(3)]
            assert statuses == ["progress", "progress", "success"]

    def test_malformed_message(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.receive_json()
            websocket.send_text("not json")
            message = websocket.receive_json()
            assert message["id"] == "system"
            assert message["status"] == "error"


class TestSenderShutdown:
    """测试 WebSocket 发送协程的清理"""

    def test_failed_sender_does_not_propagate(self, caplog):
        """测试发送协程已因异常结束时，清理流程只记录警告"""
        async def broken_send():
            raise RuntimeError("socket closed")

        async def scenario():
            sender = asyncio.create_task(broken_send())
            await asyncio.sleep(0)
            assert sender.done()
            await _stop_sender(sender)

        with caplog.at_level(logging.WARNING, logger="compute_worker.api.routes.worker"):
            asyncio.run(scenario())

        assert "socket closed" in caplog.text

    def test_running_sender_cancelled(self):
        async def scenario():
            sender = asyncio.create_task(asyncio.sleep(10))
            await asyncio.sleep(0)
            await _stop_sender(sender)
            return sender

        assert asyncio.run(scenario()).cancelled()
