"""
Tests for AsyncOperation and RetryPolicy

Tests that every request settles into exactly one outcome, that the callback
fires exactly once, and that only network failures are ever retried.
"""

import pytest

from chat_sdk import (
    ApiCallback,
    AsyncOperation,
    NetworkError,
    NetworkFailure,
    ProtocolError,
    ProtocolFailure,
    RetryPolicy,
    Success,
    UnexpectedFailure,
    dispatch,
)


class ScriptedRequest:
    """Retryable call returning or raising scripted results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        if isinstance(result, Exception):
            raise result
        return result


class RecordingCallback(ApiCallback):
    """Callback recording every notification it receives."""

    def __init__(self):
        self.calls = []

    def on_success(self, value):
        self.calls.append(("success", value))

    def on_network_error(self, exc):
        self.calls.append(("network", exc))

    def on_protocol_error(self, failure):
        self.calls.append(("protocol", failure))

    def on_unexpected_error(self, exc):
        self.calls.append(("unexpected", exc))


async def no_sleep(delay):
    no_sleep.delays.append(delay)


no_sleep.delays = []


class TestOutcomeClassification:
    """Tests for mapping transport results to outcomes."""

    @pytest.mark.asyncio
    async def test_success_is_transformed(self):
        """Test that the transform is applied to the success payload."""
        callback = RecordingCallback()
        operation = AsyncOperation(
            "flows",
            ScriptedRequest({"flows": ["a", "b"]}),
            transform=lambda payload: payload["flows"],
            callback=callback,
        )
        outcome = await operation.run()
        assert outcome == Success(["a", "b"])
        assert callback.calls == [("success", ["a", "b"])]

    @pytest.mark.asyncio
    async def test_network_error(self):
        """Test that a network error is surfaced, not retried by default."""
        request = ScriptedRequest(NetworkError("down"), {"ok": True})
        callback = RecordingCallback()
        outcome = await AsyncOperation("op", request, callback=callback).run()
        assert isinstance(outcome, NetworkFailure)
        assert request.calls == 1
        assert [kind for kind, _ in callback.calls] == ["network"]

    @pytest.mark.asyncio
    async def test_protocol_error_is_preserved(self):
        """Test that errcode, message and raw body are kept verbatim."""
        body = {"errcode": "M_FORBIDDEN", "error": "Nope", "extra": 1}
        request = ScriptedRequest(ProtocolError.from_body(body, 403))
        outcome = await AsyncOperation("op", request).run()
        assert isinstance(outcome, ProtocolFailure)
        assert outcome.errcode == "M_FORBIDDEN"
        assert outcome.error == "Nope"
        assert outcome.status_code == 403
        assert outcome.details == body

    @pytest.mark.asyncio
    async def test_transform_failure_is_unexpected(self):
        """Test that a failing transform is reported, not swallowed."""
        callback = RecordingCallback()
        operation = AsyncOperation(
            "op",
            ScriptedRequest({}),
            transform=lambda payload: payload["missing"],
            callback=callback,
        )
        outcome = await operation.run()
        assert isinstance(outcome, UnexpectedFailure)
        assert isinstance(outcome.cause, KeyError)
        assert [kind for kind, _ in callback.calls] == ["unexpected"]

    @pytest.mark.asyncio
    async def test_other_exception_is_unexpected(self):
        """Test that arbitrary request failures become unexpected errors."""
        outcome = await AsyncOperation(
            "op", ScriptedRequest(ValueError("bad json"))
        ).run()
        assert isinstance(outcome, UnexpectedFailure)

    @pytest.mark.asyncio
    async def test_each_run_notifies_once(self):
        """Test that each run issues a fresh request and one notification."""
        request = ScriptedRequest({"n": 1}, {"n": 2})
        callback = RecordingCallback()
        operation = AsyncOperation("op", request, callback=callback)
        await operation.run()
        await operation.run()
        assert request.calls == 2
        assert callback.calls == [("success", {"n": 1}), ("success", {"n": 2})]


class TestRetryPolicy:
    """Tests for the retry wrapper."""

    @pytest.mark.asyncio
    async def test_network_failure_retried_until_success(self):
        """Test that network failures are re-issued up to max_attempts."""
        no_sleep.delays.clear()
        request = ScriptedRequest(
            NetworkError("1"), NetworkError("2"), {"ok": True}
        )
        callback = RecordingCallback()
        operation = AsyncOperation(
            "op",
            request,
            callback=callback,
            retry_policy=RetryPolicy(max_attempts=3, backoff=0.5),
            sleep=no_sleep,
        )
        outcome = await operation.run()
        assert outcome == Success({"ok": True})
        assert request.calls == 3
        assert no_sleep.delays == [0.5, 1.0]
        assert callback.calls == [("success", {"ok": True})]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        """Test that the last network failure is surfaced once."""
        request = ScriptedRequest(NetworkError("down"))
        callback = RecordingCallback()
        operation = AsyncOperation(
            "op",
            request,
            callback=callback,
            retry_policy=RetryPolicy(max_attempts=2, backoff=0),
            sleep=no_sleep,
        )
        outcome = await operation.run()
        assert isinstance(outcome, NetworkFailure)
        assert request.calls == 2
        assert len(callback.calls) == 1

    @pytest.mark.asyncio
    async def test_retry_is_logged(self, caplog):
        """Test the log lines of a retried request."""
        request = ScriptedRequest(NetworkError("reset"), {"ok": True})
        operation = AsyncOperation(
            "fetch thing",
            request,
            retry_policy=RetryPolicy(max_attempts=2, backoff=0.25),
            sleep=no_sleep,
        )
        with caplog.at_level("INFO", logger="chat_sdk"):
            await operation.run()

        messages = [record.getMessage() for record in caplog.records]
        assert "fetch thing: sending request" in messages
        assert "fetch thing: network error: reset" in messages
        assert (
            "fetch thing: network failure (reset), retry 1/1 in 0.25s"
            in messages
        )
        assert "fetch thing: succeeded" in messages

    @pytest.mark.asyncio
    async def test_protocol_errors_never_retried(self):
        """Test that even rate limiting is left to the caller."""
        request = ScriptedRequest(
            ProtocolError("M_LIMIT_EXCEEDED", "slow down", retry_after_ms=100)
        )
        operation = AsyncOperation(
            "op",
            request,
            retry_policy=RetryPolicy(max_attempts=5, backoff=0),
            sleep=no_sleep,
        )
        outcome = await operation.run()
        assert isinstance(outcome, ProtocolFailure)
        assert outcome.retry_after_ms == 100
        assert request.calls == 1

    @pytest.mark.asyncio
    async def test_predicate_filters_failures(self):
        """Test that retry_on can decline a network failure."""
        request = ScriptedRequest(NetworkError("fatal"))
        policy = RetryPolicy(
            max_attempts=3,
            backoff=0,
            retry_on=lambda failure: "fatal" not in str(failure.cause),
        )
        operation = AsyncOperation(
            "op", request, retry_policy=policy, sleep=no_sleep
        )
        await operation.run()
        assert request.calls == 1

    def test_backoff_is_capped(self):
        """Test exponential delays and the max_backoff cap."""
        policy = RetryPolicy(max_attempts=10, backoff=1.0, max_backoff=5.0)
        assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 5.0]

    def test_invalid_max_attempts(self):
        """Test that a policy needs at least one attempt."""
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)


class TestDispatch:
    """Tests for routing outcomes to callbacks."""

    def test_dispatch_rejects_non_outcomes(self):
        """Test that dispatch refuses anything but the four outcomes."""
        with pytest.raises(TypeError):
            dispatch("not an outcome", RecordingCallback())

    def test_dispatch_protocol_failure(self):
        """Test that protocol failures reach on_protocol_error."""
        callback = RecordingCallback()
        failure = ProtocolFailure("M_NOT_FOUND", "Unknown room")
        dispatch(failure, callback)
        assert callback.calls == [("protocol", failure)]
