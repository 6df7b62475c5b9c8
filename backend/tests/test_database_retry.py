# backend/tests/test_database_retry.py

import pytest
from unittest.mock import Mock, patch
from sqlalchemy.exc import OperationalError, IntegrityError

from core.database_retry import (
    is_retryable_error, retry_on_deadlock, with_deadlock_retry
)


def deadlock_error():
    pg_error = Mock()
    pg_error.pgcode = '40P01'  # deadlock_detected
    return OperationalError("deadlock detected", None, pg_error)


@pytest.mark.unit
class TestDatabaseRetry:
    """Test database retry mechanisms"""

    def test_is_retryable_error_postgres_deadlock(self):
        assert is_retryable_error(deadlock_error()) is True

    def test_is_retryable_error_postgres_serialization(self):
        pg_error = Mock()
        pg_error.pgcode = '40001'  # serialization_failure

        error = OperationalError("could not serialize access", None, pg_error)
        assert is_retryable_error(error) is True

    def test_is_retryable_error_sqlite_locked(self):
        error = OperationalError("database is locked", None, None)
        assert is_retryable_error(error) is True

    def test_is_not_retryable_error(self):
        assert is_retryable_error(Exception("Some other error")) is False
        assert is_retryable_error(OperationalError("connection refused", None, None)) is False
        assert is_retryable_error(IntegrityError("duplicate key", None, None)) is False

    def test_success_first_try(self):
        mock_func = Mock(return_value="success")

        result = retry_on_deadlock(mock_func, "arg1", kwarg1="value1")

        assert result == "success"
        mock_func.assert_called_once_with("arg1", kwarg1="value1")

    @patch("core.database_retry.time.sleep")
    def test_success_after_retry(self, mock_sleep):
        mock_func = Mock(side_effect=[deadlock_error(), "success"])

        result = retry_on_deadlock(mock_func, max_retries=2, initial_delay=0.01)

        assert result == "success"
        assert mock_func.call_count == 2
        mock_sleep.assert_called_once()

    @patch("core.database_retry.time.sleep")
    def test_max_retries_exceeded(self, mock_sleep):
        mock_func = Mock(side_effect=deadlock_error())

        with pytest.raises(OperationalError):
            retry_on_deadlock(mock_func, max_retries=2, initial_delay=0.01)

        assert mock_func.call_count == 3  # Initial + 2 retries

    def test_non_retryable_error_raised_immediately(self):
        mock_func = Mock(side_effect=ValueError("Invalid value"))

        with pytest.raises(ValueError):
            retry_on_deadlock(mock_func)

        mock_func.assert_called_once()

    @patch("core.database_retry.time.sleep")
    def test_decorator(self, mock_sleep):
        calls = []

        @with_deadlock_retry(max_retries=2, initial_delay=0.01)
        def redeem(value):
            calls.append(value)
            if len(calls) < 2:
                raise deadlock_error()
            return f"success_{value}"

        assert redeem("test") == "success_test"
        assert calls == ["test", "test"]

    @patch("core.database_retry.time.sleep")
    def test_exponential_backoff(self, mock_sleep):
        mock_func = Mock(side_effect=[deadlock_error(), deadlock_error(), "success"])

        retry_on_deadlock(
            mock_func,
            max_retries=3,
            initial_delay=0.1,
            backoff_factor=2.0,
            jitter=False,
        )

        delays = [c.args[0] for c in mock_sleep.call_args_list]
        assert delays == [pytest.approx(0.1), pytest.approx(0.2)]

    @patch("core.database_retry.time.sleep")
    def test_jitter_bounds(self, mock_sleep):
        mock_func = Mock(side_effect=[deadlock_error(), "success"])

        retry_on_deadlock(mock_func, initial_delay=0.1, jitter=True)

        assert 0.1 <= mock_sleep.call_args.args[0] <= 0.125
