"""
Test the package entry point: .env loading order and lazy exports.
"""

from pathlib import Path

import pytest

import beanstalk_api


class TestDotenvLoading:
    def test_dotenv_loads_before_imports(self):
        """load_dotenv() must run before logging is configured."""
        init_file = Path(beanstalk_api.__file__)
        lines = init_file.read_text().split("\n")

        dotenv_call_line = None
        logger_import_line = None
        for i, line in enumerate(lines):
            if line.strip() == "load_dotenv()":
                dotenv_call_line = i
            elif "from .logger import setup_logging" in line:
                logger_import_line = i

        assert dotenv_call_line is not None, "load_dotenv() call not found"
        assert logger_import_line is not None, "logger import not found"
        assert dotenv_call_line < logger_import_line


class TestLazyExports:
    def test_client_and_config(self):
        from beanstalk_api.config import BeanstalkConfig
        from beanstalk_api.core.api.beanstalk import BeanstalkClient

        assert beanstalk_api.BeanstalkClient is BeanstalkClient
        assert beanstalk_api.BeanstalkConfig is BeanstalkConfig

    @pytest.mark.parametrize(
        "name",
        ["ApiError", "ArgumentError", "BeanstalkError", "ParseError", "TransportError"],
    )
    def test_exceptions(self, name):
        from beanstalk_api.core import exceptions

        assert getattr(beanstalk_api, name) is getattr(exceptions, name)

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            beanstalk_api.DoesNotExist
