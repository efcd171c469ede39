"""Unit tests for view snapshots and the request-sequence guard"""

import asyncio

import pytest

from fraudguard.domain.exceptions import BackendUnavailableError
from fraudguard.services.views import ChannelRankingView, SnapshotView


class ScriptedView(SnapshotView):
    """Each refresh awaits the next scripted step: (gate, rows or exception)"""

    name = "scripted"

    def __init__(self, steps, timeout: float = 1.0):
        super().__init__(timeout)
        self.steps = list(steps)

    async def fetch(self):
        gate, outcome = self.steps.pop(0)
        if gate is not None:
            await gate.wait()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


async def test_refresh_applies_rows():
    view = ScriptedView([(None, ["a", "b"])])

    assert await view.refresh() is True
    assert view.snapshot.rows == ["a", "b"]
    assert view.snapshot.error is None
    assert view.snapshot.sequence == 1
    assert view.loading is False


async def test_slow_superseded_response_is_discarded():
    slow_gate = asyncio.Event()
    view = ScriptedView([(slow_gate, ["old"]), (None, ["new"])])

    slow = asyncio.create_task(view.refresh())
    while len(view.steps) == 2:
        await asyncio.sleep(0)
    assert await view.refresh() is True

    slow_gate.set()
    assert await slow is False

    assert view.snapshot.rows == ["new"]
    assert view.snapshot.sequence == 2


async def test_backend_failure_sets_error_and_empties_rows():
    view = ScriptedView([(None, ["a"]), (None, BackendUnavailableError("transactions: down", table="transactions"))])
    await view.refresh()

    assert await view.refresh() is True

    assert view.snapshot.rows == []
    assert view.snapshot.error == "transactions: down"


async def test_timeout_sets_error():
    never = asyncio.Event()
    view = ScriptedView([(never, ["late"])], timeout=0.01)

    await view.refresh()

    assert view.snapshot.rows == []
    assert view.snapshot.error.startswith("Timed out")
    assert view.loading is False


class WindowEcho:
    """Analytics stand-in returning the window it was asked for"""

    async def channel_ranking(self, window):
        return [window]


async def test_set_filter_refetches_with_new_window():
    view = ChannelRankingView(WindowEcho(), timeout=1.0)

    assert await view.set_filter("7days") is True
    assert view.snapshot.rows == ["7days"]


async def test_set_filter_rejects_unknown_window():
    view = ChannelRankingView(WindowEcho(), window="30days", timeout=1.0)
    await view.refresh()

    with pytest.raises(ValueError):
        await view.set_filter("90days")

    assert view.window == "30days"
    assert view.snapshot.rows == ["30days"]
    assert view.snapshot.sequence == 1


def test_view_cannot_be_built_with_unknown_window():
    with pytest.raises(ValueError):
        ChannelRankingView(WindowEcho(), window="90days")
