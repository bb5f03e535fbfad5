import asyncio

import pytest

from kairos.client.timeout_guard import AuthTimeoutGuard


@pytest.mark.asyncio
async def test_fires_once_after_timeout():
    calls = []
    guard = AuthTimeoutGuard(0.02, lambda: calls.append("timeout"))

    guard.arm()
    assert guard.pending is True
    await asyncio.sleep(0.05)

    assert calls == ["timeout"]
    assert guard.fired is True
    assert guard.pending is False

    # No retry after firing
    guard.arm()
    await asyncio.sleep(0.05)
    assert calls == ["timeout"]


@pytest.mark.asyncio
async def test_cancel_prevents_firing():
    calls = []
    guard = AuthTimeoutGuard(0.02, lambda: calls.append("timeout"))

    guard.arm()
    guard.cancel()
    await asyncio.sleep(0.05)

    assert calls == []
    assert guard.fired is False


@pytest.mark.asyncio
async def test_arm_is_idempotent():
    calls = []
    guard = AuthTimeoutGuard(0.02, lambda: calls.append("timeout"))

    guard.arm()
    guard.arm()
    await asyncio.sleep(0.05)

    assert calls == ["timeout"]
