"""
Unit tests for utility functions
"""

import logging
import time

import pytest

from fluent.utils import Timer, log_execution_time


class TestTimer:
    """Test Timer class"""

    def test_timer_basic_functionality(self):
        """Test basic timer functionality"""
        timer = Timer()

        # Timer not started
        assert timer.elapsed() is None
        assert timer.elapsed_ms() is None

        timer.start()
        assert timer.start_time is not None

        time.sleep(0.01)

        elapsed = timer.elapsed()
        assert elapsed is not None
        assert elapsed > 0
        assert timer.elapsed_ms() >= 10

    def test_timer_stop(self):
        """Test timer stop functionality"""
        timer = Timer()
        timer.start()
        time.sleep(0.01)
        timer.stop()
        first_elapsed = timer.elapsed()

        time.sleep(0.01)

        # Elapsed time should not change after stop
        assert timer.elapsed() == first_elapsed

    def test_stop_without_start(self):
        """Stopping an unstarted timer does nothing"""
        timer = Timer()
        timer.stop()
        assert timer.end_time is None


class TestLogExecutionTime:
    """Test log_execution_time decorator"""

    def test_sync_function(self, caplog):
        """Sync functions keep their result and log timing"""

        @log_execution_time
        def add(a, b):
            return a + b

        with caplog.at_level(logging.DEBUG, logger="fluent.utils"):
            assert add(2, 3) == 5

        assert "add executed in" in caplog.text

    @pytest.mark.asyncio
    async def test_async_function(self, caplog):
        """Coroutines are awaited inside the wrapper"""

        @log_execution_time
        async def double(value):
            return value * 2

        with caplog.at_level(logging.DEBUG, logger="fluent.utils"):
            assert await double(4) == 8

        assert "double executed in" in caplog.text

    @pytest.mark.asyncio
    async def test_exception_is_logged_and_raised(self, caplog):
        """Failures are logged and propagate"""

        @log_execution_time
        async def explode():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await explode()

        assert "explode failed after" in caplog.text

    def test_preserves_metadata(self):
        """functools.wraps keeps the name and docstring"""

        @log_execution_time
        def documented():
            """Docstring"""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docstring"
