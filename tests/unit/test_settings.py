"""
配置与日志单元测试
"""

import logging

import pytest
from compute_worker.config.settings import get, reload_settings, settings
from compute_worker.config.logging import setup_logging


@pytest.fixture
def fresh_settings():
    """每个测试前后清除配置缓存"""
    reload_settings()
    yield
    reload_settings()


class TestSettings:
    """测试 settings.yaml 加载"""

    def test_yaml_values(self, fresh_settings):
        worker = settings().worker
        assert worker.simulate_duration == 3000
        assert worker.simulate_steps == 100

    def test_env_override(self, fresh_settings, monkeypatch):
        """测试 WORKER_<SECTION>_<KEY> 环境变量覆盖"""
        monkeypatch.setenv("WORKER_WORKER_SIMULATE_STEPS", "7")
        reload_settings()
        assert settings().worker.simulate_steps == 7

    def test_get_default(self, fresh_settings):
        assert get("worker", "missing_key", 5) == 5
        assert get("missing_section", default="x") == "x"

    def test_settings_singleton(self, fresh_settings):
        assert settings() is settings()


class TestLogging:
    """测试日志配置"""

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "worker.log"
        setup_logging(level="DEBUG", log_file=str(log_file))
        logging.getLogger("compute_worker.test").debug("hello log")

        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello log" in log_file.read_text(encoding="utf-8")
        assert logging.getLogger().level == logging.DEBUG

        logging.getLogger().handlers.clear()
        logging.getLogger().setLevel(logging.WARNING)
