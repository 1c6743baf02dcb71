"""
stdio 通道集成测试
"""

import asyncio
import io
import json
import math

from compute_worker.cli import serve_stdio


def _run(lines):
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    asyncio.run(serve_stdio(stdin, stdout))
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


class TestStdioChannel:
    """测试换行分隔 JSON 通道"""

    def test_ready_then_responses(self):
        responses = _run([
            json.dumps({"id": "a", "command": "calculate", "data": {"operation": "sum", "numbers": [1, 2, 3]}}),
            "",
            json.dumps({"id": "b", "command": "bogus", "data": {}}),
        ])

        assert responses[0]["status"] == "ready"
        assert responses[1]["id"] == "a"
        assert responses[1]["result"] == 6
        assert responses[2]["id"] == "b"
        assert responses[2]["status"] == "error"

    def test_simulation_finishes_before_exit(self):
        """测试 stdin 结束后仍会等待 simulateWork 完成"""
        responses = _run([
            json.dumps({"id": "s", "command": "simulateWork", "data": {"duration": 10, "steps": 2}}),
        ])

        sim = [m for m in responses if m["id"] == "s"]
        assert [m["status"] for m in sim] == ["progress", "progress", "success"]

    def test_non_finite_results_survive_encoding(self):
        responses = _run([
            json.dumps({"id": "avg", "command": "calculate", "data": {"operation": "average", "numbers": []}}),
        ])
        assert math.isnan(responses[-1]["result"])

    def test_malformed_line_reported_on_system_channel(self):
        responses = _run([
            "{not json",
            json.dumps({"id": "f", "command": "fibonacci", "data": {"n": 2}}),
        ])

        assert responses[1]["id"] == "system"
        assert responses[1]["error"] == "Worker internal error"
        assert responses[2]["result"] == [0, 1, 1]
