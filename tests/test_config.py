"""Config 模块测试。

测试 HLERR_* 环境变量解析和配置管理。
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest import mock

import pytest

from hlerr.config import (
    EXIT_FAILURE,
    EXIT_USAGE,
    LINE_CAPACITY,
    Config,
    get_config,
    load_config,
    reload_config,
)


def clean_env() -> dict[str, str]:
    """去掉 HLERR_* 变量后的环境。"""
    return {k: v for k, v in os.environ.items() if not k.startswith("HLERR_")}


@pytest.fixture
def tmp_logdir(tmp_path: Path):
    """日志文件写到 tmp_path 下。"""
    with mock.patch("hlerr.config.tempfile.gettempdir", return_value=str(tmp_path)):
        yield tmp_path


class TestDefaults:
    """测试默认值。"""

    def test_defaults(self):
        """未设置任何变量。"""
        with mock.patch.dict(os.environ, clean_env(), clear=True):
            config = load_config()
            assert config.line_capacity == LINE_CAPACITY
            assert config.log_debug is False
            assert config.log_file is None
            assert config.log_level == logging.WARNING

    def test_constants(self):
        """退出码与缓冲容量。"""
        assert LINE_CAPACITY == 1024
        assert EXIT_FAILURE == 1
        assert EXIT_USAGE == 2


class TestParseBool:
    """测试布尔值解析。"""

    @pytest.mark.parametrize("value", ["true", "True", "TRUE", "1", "yes", "Yes", "on"])
    def test_truthy_values(self, value: str, tmp_logdir: Path):
        """真值。"""
        with mock.patch.dict(os.environ, {"HLERR_LOG_DEBUG": value}, clear=False):
            config = load_config()
            assert config.log_debug is True

    @pytest.mark.parametrize("value", ["false", "False", "0", "no", "off", ""])
    def test_falsy_values(self, value: str):
        """假值。"""
        with mock.patch.dict(os.environ, {"HLERR_LOG_DEBUG": value}, clear=False):
            config = load_config()
            assert config.log_debug is False
            assert config.log_file is None


class TestLogFile:
    """测试调试日志文件路径。"""

    def test_debug_generates_log_file(self, tmp_logdir: Path):
        """调试模式自动生成日志文件路径。"""
        with mock.patch.dict(os.environ, {"HLERR_LOG_DEBUG": "1"}, clear=False):
            config = load_config()

        assert config.log_file is not None
        log_file = Path(config.log_file)
        assert log_file.parent == (tmp_logdir / "hlerr").resolve()
        assert log_file.name.startswith("hlerr_debug_")
        assert log_file.name.endswith(f"_{os.getpid()}.log")
        assert log_file.parent.is_dir()


class TestLogLevel:
    """测试日志级别解析。"""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("DEBUG", logging.DEBUG),
            ("info", logging.INFO),
            (" error ", logging.ERROR),
            ("CRITICAL", logging.CRITICAL),
        ],
    )
    def test_valid_levels(self, value: str, expected: int):
        """有效级别，大小写不敏感。"""
        with mock.patch.dict(os.environ, {"HLERR_LOG_LEVEL": value}, clear=False):
            assert load_config().log_level == expected

    @pytest.mark.parametrize("value", ["verbose", "10", ""])
    def test_invalid_falls_back_to_warning(self, value: str):
        """无效值回退到 WARNING。"""
        with mock.patch.dict(os.environ, {"HLERR_LOG_LEVEL": value}, clear=False):
            assert load_config().log_level == logging.WARNING


class TestGlobalConfig:
    """测试全局配置实例。"""

    def test_get_config_is_cached(self):
        """多次获取返回同一实例。"""
        first = reload_config()
        assert get_config() is first
        assert get_config() is get_config()

    def test_reload_picks_up_changes(self):
        """重新加载读取新的环境变量。"""
        with mock.patch.dict(os.environ, {"HLERR_LOG_LEVEL": "ERROR"}, clear=False):
            assert reload_config().log_level == logging.ERROR
        with mock.patch.dict(os.environ, {"HLERR_LOG_LEVEL": "INFO"}, clear=False):
            assert reload_config().log_level == logging.INFO
        reload_config()

    def test_repr(self):
        """repr 显示级别名称。"""
        config = Config(log_level=logging.INFO)
        text = repr(config)
        assert "line_capacity=1024" in text
        assert "log_level=INFO" in text
