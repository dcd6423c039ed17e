"""
Tests for the error boundary decorator and exception taxonomy.
"""

import logging

import pytest

from deskstat.utils.errors import (
    CompileError,
    DeskstatError,
    ModuleResolutionError,
    ThemeNotFoundError,
    error_boundary,
)


class TestErrorBoundary:
    """Test suite for error_boundary."""

    def test_contains_and_logs_exception(self, caplog):
        """The exception is logged and the default value returned."""

        @error_boundary(default_return=False)
        def apply_hints():
            raise RuntimeError("wmctrl missing")

        with caplog.at_level(logging.ERROR):
            assert apply_hints() is False

        assert "Error in apply_hints: wmctrl missing" in caplog.text

    def test_record_carries_function_details(self, caplog):
        """The log record names the failing function and its module."""

        @error_boundary()
        def reload_window():
            raise RuntimeError("gone")

        with caplog.at_level(logging.ERROR):
            reload_window()

        record = caplog.records[-1]
        assert record.function == "reload_window"
        assert record.func_module == __name__
        assert record.exc_info is not None

    def test_reraise(self):
        @error_boundary(reraise=True)
        def failing():
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            failing()

    def test_log_level(self, caplog):
        @error_boundary(log_level=logging.WARNING)
        def failing():
            raise ValueError("soft failure")

        with caplog.at_level(logging.WARNING):
            failing()

        assert caplog.records[-1].levelno == logging.WARNING

    def test_success_passes_through(self):
        @error_boundary(default_return=-1)
        def add(a, b):
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"


class TestErrorTaxonomy:
    """Compile errors share one base class."""

    def test_hierarchy(self):
        assert issubclass(ThemeNotFoundError, CompileError)
        assert issubclass(CompileError, DeskstatError)

    def test_module_resolution_message(self):
        error = ModuleResolutionError("foo-theme-icons", requested_by="icons.css", kind="CSS")

        assert str(error) == (
            'Cannot find module "foo-theme-icons" required by CSS pre-load of "icons.css"'
        )
        assert error.module == "foo-theme-icons"
