"""TaskdeskConfig + load_config 单元测试 -- 环境变量映射、默认值"""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError
from taskdesk.core.config import (
    TaskdeskConfig,
    get_db_path,
    get_session_path,
    load_config,
)

_STORE_ENV_VARS = [
    "TASKDESK_STORE_MODE",
    "TASKDESK_STORE_URL",
    "TASKDESK_STORE_KEY",
    "TASKDESK_STORE_TABLE",
    "TASKDESK_STORE_TIMEOUT_S",
]


@pytest.fixture
def clean_env(monkeypatch):
    """清除相关环境变量"""
    for name in _STORE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestTaskdeskConfig:
    """TaskdeskConfig 数据模型测试"""

    def test_default_values(self):
        config = TaskdeskConfig()
        assert config.store_mode == "sqlite"
        assert config.store_url == "http://localhost:54321"
        assert config.store_key.get_secret_value() == ""
        assert config.store_table == "tasks"
        assert config.timeout_s == 10

    def test_timeout_min_value(self):
        with pytest.raises(ValidationError):
            TaskdeskConfig(timeout_s=0)

    def test_invalid_mode_rejected(self):
        with pytest.raises(ValidationError):
            TaskdeskConfig(store_mode="postgres")

    def test_key_not_in_repr(self):
        config = TaskdeskConfig(store_key=SecretStr("sk-secret"))
        assert "sk-secret" not in repr(config)


class TestLoadConfig:
    """load_config() 环境变量映射测试"""

    def test_default_when_no_env(self, clean_env):
        config = load_config()
        assert config.store_mode == "sqlite"
        assert config.timeout_s == 10

    def test_all_env_vars(self, clean_env):
        clean_env.setenv("TASKDESK_STORE_MODE", "remote")
        clean_env.setenv("TASKDESK_STORE_URL", "https://example.supabase.co")
        clean_env.setenv("TASKDESK_STORE_KEY", "anon-key")
        clean_env.setenv("TASKDESK_STORE_TABLE", "todo_items")
        clean_env.setenv("TASKDESK_STORE_TIMEOUT_S", "30")

        config = load_config()
        assert config.store_mode == "remote"
        assert config.store_url == "https://example.supabase.co"
        assert config.store_key.get_secret_value() == "anon-key"
        assert config.store_table == "todo_items"
        assert config.timeout_s == 30

    def test_invalid_timeout_uses_default(self, clean_env):
        """无效 timeout 值不阻塞启动，使用默认值"""
        clean_env.setenv("TASKDESK_STORE_TIMEOUT_S", "soon")
        assert load_config().timeout_s == 10


class TestPaths:
    """路径类配置"""

    def test_db_path_under_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.delenv("TASKDESK_DB_PATH", raising=False)
        monkeypatch.setenv("TASKDESK_DATA_DIR", str(tmp_path))
        assert get_db_path() == str(tmp_path / "sqlite" / "taskdesk.db")

    def test_db_path_override(self, monkeypatch):
        monkeypatch.setenv("TASKDESK_DB_PATH", "/tmp/custom.db")
        assert get_db_path() == "/tmp/custom.db"

    def test_session_path_under_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.delenv("TASKDESK_SESSION_PATH", raising=False)
        monkeypatch.setenv("TASKDESK_DATA_DIR", str(tmp_path))
        assert get_session_path() == Path(tmp_path) / "session.json"
