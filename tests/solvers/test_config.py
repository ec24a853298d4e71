"""SolverConfig 环境变量加载测试"""

import os
from unittest.mock import patch

from mflix.solvers import SolverConfig, load_solver_config


class TestLoadSolverConfig:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = load_solver_config()
        assert config == SolverConfig()
        assert config.html_timeout_s == 8
        assert config.delegate_timeout_s == 25
        assert config.timer_api_url.endswith("/solve?url=")

    def test_env_overrides(self):
        env = {
            "MFLIX_TIMER_API_URL": "http://t.local/solve?url=",
            "MFLIX_RESOLVER_API_URL": "http://r.local/solve?url=",
            "MFLIX_HTML_TIMEOUT_S": "3.5",
            "MFLIX_DELEGATE_TIMEOUT_S": "40",
            "MFLIX_SCANNER_REFERER": "https://ref.local/",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_solver_config()
        assert config.timer_api_url == "http://t.local/solve?url="
        assert config.resolver_api_url == "http://r.local/solve?url="
        assert config.html_timeout_s == 3.5
        assert config.delegate_timeout_s == 40
        assert config.scanner_referer == "https://ref.local/"

    def test_invalid_timeout_falls_back(self):
        """非法超时值不阻塞启动，回退默认值"""
        with patch.dict(
            os.environ,
            {"MFLIX_HTML_TIMEOUT_S": "soon", "MFLIX_DELEGATE_TIMEOUT_S": "-1"},
            clear=True,
        ):
            config = load_solver_config()
        assert config.html_timeout_s == 8
        assert config.delegate_timeout_s == 25
