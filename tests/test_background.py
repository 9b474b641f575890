"""Tests du runner de tâches de fond."""

from __future__ import annotations

import asyncio

import pytest
from prometheus_client import REGISTRY

from backend.infra.ops.background import BackgroundTasks


@pytest.mark.asyncio
async def test_drain_waits_for_tasks() -> None:
    tasks = BackgroundTasks()
    done: list[str] = []

    async def work() -> None:
        await asyncio.sleep(0.01)
        done.append("ok")

    tasks.spawn(work(), name="work")
    assert len(tasks) == 1

    assert await tasks.drain(1.0) is True
    assert done == ["ok"]
    assert len(tasks) == 0


@pytest.mark.asyncio
async def test_drain_with_nothing_pending() -> None:
    assert await BackgroundTasks().drain(0.1) is True


@pytest.mark.asyncio
async def test_failure_is_counted_not_raised() -> None:
    tasks = BackgroundTasks()
    labels = {"name": "doomed"}
    before = REGISTRY.get_sample_value("background_task_failures_total", labels) or 0.0

    async def boom() -> None:
        raise RuntimeError("disk full")

    tasks.spawn(boom(), name="doomed")
    assert await tasks.drain(1.0) is True
    await asyncio.sleep(0)

    assert REGISTRY.get_sample_value("background_task_failures_total", labels) == before + 1
    assert len(tasks) == 0


@pytest.mark.asyncio
async def test_drain_timeout() -> None:
    tasks = BackgroundTasks()
    task = tasks.spawn(asyncio.sleep(10), name="slow")

    assert await tasks.drain(0.01) is False

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
