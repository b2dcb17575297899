"""Tests for PollingController."""

import asyncio

import pytest

from moneyapp.polling import PollEvent, PollingController
from moneyapp.services.api import ApiError, ApiErrorKind


class Counter:
    """Refresh callable that counts its calls."""

    def __init__(self, failures: int = 0):
        self.calls = 0
        self.failures = failures

    async def __call__(self) -> int:
        self.calls += 1
        if self.calls <= self.failures:
            raise ApiError(ApiErrorKind.OFFLINE)
        return self.calls


class TestConstruction:
    """Tests for controller setup."""

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_interval_must_be_positive(self, interval):
        """Test a non-positive interval is rejected."""
        with pytest.raises(ValueError):
            PollingController(Counter(), interval_seconds=interval)

    def test_start_requires_running_loop(self):
        """Test start() outside an event loop fails loudly."""
        poller = PollingController(Counter(), interval_seconds=0.1)

        with pytest.raises(RuntimeError):
            poller.start()

    def test_stop_when_never_started(self):
        """Test stop() on an idle controller is a no-op."""
        poller = PollingController(Counter(), interval_seconds=0.1)

        poller.stop()

        assert poller.is_running is False


class TestCadence:
    """Tests for when iterations run."""

    def test_fires_immediately(self):
        """Test exactly one call happens before the first interval elapses."""
        refresh = Counter()

        async def run():
            poller = PollingController(refresh, interval_seconds=0.5)
            poller.start()
            await asyncio.sleep(0.1)
            calls = refresh.calls
            poller.stop()
            await poller.wait_stopped()
            return calls

        assert asyncio.run(run()) == 1

    def test_waits_first_interval_when_not_firing_immediately(self):
        """Test no call happens before the first interval."""
        refresh = Counter()

        async def run():
            poller = PollingController(refresh, interval_seconds=0.2, fire_immediately=False)
            poller.start()
            await asyncio.sleep(0.05)
            early = refresh.calls
            await asyncio.sleep(0.3)
            later = refresh.calls
            poller.stop()
            await poller.wait_stopped()
            return early, later

        early, later = asyncio.run(run())
        assert early == 0
        assert later >= 1

    def test_repeats_on_interval(self):
        """Test iterations keep coming while running."""
        refresh = Counter()

        async def run():
            poller = PollingController(refresh, interval_seconds=0.02)
            poller.start()
            await asyncio.sleep(0.2)
            poller.stop()
            await poller.wait_stopped()
            return poller.iterations

        assert asyncio.run(run()) >= 3

    def test_start_is_idempotent(self):
        """Test a second start() does not add a second loop."""
        refresh = Counter()

        async def run():
            poller = PollingController(refresh, interval_seconds=0.5)
            poller.start()
            poller.start()
            await asyncio.sleep(0.1)
            poller.stop()
            await poller.wait_stopped()

        asyncio.run(run())
        assert refresh.calls == 1


class TestStop:
    """Tests for stopping."""

    def test_no_calls_after_stop(self):
        """Test nothing runs after stop(), even past another interval."""
        refresh = Counter()

        async def run():
            poller = PollingController(refresh, interval_seconds=0.05)
            poller.start()
            await asyncio.sleep(0.12)
            poller.stop()
            await poller.wait_stopped()
            stopped_at = refresh.calls
            await asyncio.sleep(0.2)
            return stopped_at, refresh.calls, poller.is_running

        stopped_at, final, running = asyncio.run(run())
        assert final == stopped_at
        assert running is False

    def test_in_flight_refresh_finishes_but_no_next_iteration(self):
        """Test stop() during a refresh lets it complete and ends the loop."""
        started = []
        finished = []

        async def run():
            release = asyncio.Event()

            async def slow_refresh():
                started.append(True)
                await release.wait()
                finished.append(True)
                return "done"

            poller = PollingController(slow_refresh, interval_seconds=0.01)
            events = []
            poller.channel.subscribe(events.append)
            poller.start()
            await asyncio.sleep(0.02)
            poller.stop()
            release.set()
            await poller.wait_stopped()
            await asyncio.sleep(0.05)
            return events

        events = asyncio.run(run())
        assert len(started) == 1
        assert len(finished) == 1
        assert [e.result for e in events] == ["done"]

    def test_restart_after_stop(self):
        """Test a stopped controller can be started again."""
        refresh = Counter()

        async def run():
            poller = PollingController(refresh, interval_seconds=0.5)
            poller.start()
            await asyncio.sleep(0.05)
            poller.stop()
            await poller.wait_stopped()
            poller.start()
            await asyncio.sleep(0.05)
            running = poller.is_running
            poller.stop()
            await poller.wait_stopped()
            return running

        assert asyncio.run(run()) is True
        assert refresh.calls == 2

    def test_restart_during_in_flight_refresh_does_not_overlap(self):
        """Test start() right after stop() waits for the running refresh."""
        state = {"calls": 0, "active": 0, "peak": 0}

        async def run():
            release = asyncio.Event()

            async def slow_refresh():
                state["calls"] += 1
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
                try:
                    await release.wait()
                finally:
                    state["active"] -= 1
                return state["calls"]

            poller = PollingController(slow_refresh, interval_seconds=0.5)
            poller.start()
            await asyncio.sleep(0.02)
            poller.stop()
            poller.start()
            await asyncio.sleep(0.05)
            calls_while_blocked = state["calls"]
            release.set()
            deadline = asyncio.get_running_loop().time() + 1.0
            while state["calls"] < 2 and asyncio.get_running_loop().time() < deadline:
                await asyncio.sleep(0.005)
            poller.stop()
            await poller.wait_stopped()
            return calls_while_blocked, poller.is_running

        calls_while_blocked, running = asyncio.run(run())
        assert calls_while_blocked == 1
        assert state["calls"] == 2
        assert state["peak"] == 1
        assert running is False


class TestOutcomes:
    """Tests for published results and errors."""

    def test_errors_are_published_and_polling_continues(self):
        """Test a failing iteration does not end the loop."""
        refresh = Counter(failures=1)

        async def run():
            poller = PollingController(refresh, interval_seconds=0.02)
            events: list[PollEvent] = []
            poller.channel.subscribe(events.append)
            poller.start()
            while len(events) < 2:
                await asyncio.sleep(0.01)
            poller.stop()
            await poller.wait_stopped()
            return poller, events

        poller, events = asyncio.run(run())
        first, second = events[0], events[1]
        assert first.succeeded is False
        assert first.message == "No internet connection. Please check your network settings."
        assert first.iteration == 1
        assert second.succeeded is True
        assert second.result == 2
        assert poller.last_error is None
        assert poller.last_result is not None

    def test_unexpected_exception_gets_generic_message(self):
        """Test non-API failures never expose their text."""
        async def broken():
            raise KeyError("internal detail")

        poller = PollingController(broken, interval_seconds=1)

        event = asyncio.run(poller.poll_once())

        assert event.succeeded is False
        assert "internal detail" not in event.message
        assert isinstance(poller.last_error, KeyError)

    def test_poll_once_without_start(self):
        """Test a manual iteration publishes to the channel."""
        poller = PollingController(Counter(), interval_seconds=1)
        received = []
        poller.channel.subscribe(received.append)

        event = asyncio.run(poller.poll_once())

        assert event.result == 1
        assert received == [event]
        assert poller.iterations == 1
