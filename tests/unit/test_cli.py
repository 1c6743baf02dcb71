"""
命令行入口单元测试
"""

import importlib
import importlib.util
import os

import pytest
from compute_worker.config.settings import reload_settings, settings

cli_main = importlib.import_module("compute_worker.__main__")

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@pytest.fixture
def fresh_settings():
    """每个测试前后清除配置缓存"""
    reload_settings()
    yield
    reload_settings()


class TestParser:
    """测试参数默认值来自配置"""

    def test_serve_defaults_from_settings(self, fresh_settings):
        args = cli_main.build_parser().parse_args(["serve"])
        assert args.host == settings().server.host
        assert args.port == settings().server.port
        assert args.reload is False

    def test_serve_port_follows_env_override(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("WORKER_SERVER_PORT", "9123")
        reload_settings()
        assert cli_main.build_parser().parse_args(["serve"]).port == 9123

    def test_run_defaults_from_settings(self, fresh_settings):
        args = cli_main.build_parser().parse_args(["run"])
        assert args.log_level == settings().logging.level


class TestMain:
    """测试入口分发"""

    def test_serve_starts_uvicorn(self, fresh_settings, monkeypatch):
        calls = []
        monkeypatch.setattr(cli_main.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

        cli_main.main(["serve", "--port", "9000"])

        app, kwargs = calls[0]
        assert app == "compute_worker.api.app:create_app"
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9000
        assert kwargs["host"] == settings().server.host

    def test_no_command_prints_help(self, fresh_settings):
        with pytest.raises(SystemExit) as exc_info:
            cli_main.main([])
        assert exc_info.value.code == 1

    def test_dev_launcher_delegates(self, fresh_settings, monkeypatch):
        """测试 run.py 不带参数时以 serve --reload 调用同一入口"""
        module_spec = importlib.util.spec_from_file_location("dev_launcher", os.path.join(PROJECT_ROOT, "run.py"))
        launcher = importlib.util.module_from_spec(module_spec)
        module_spec.loader.exec_module(launcher)

        received = []
        monkeypatch.setattr(cli_main, "main", lambda argv=None: received.append(argv))
        monkeypatch.setattr("sys.argv", ["run.py"])

        launcher.main()

        assert received == [["serve", "--reload"]]
