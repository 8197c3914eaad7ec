import asyncio
import os
import time
from pathlib import Path

from ocrbridge import scheduler as scheduler_module
from ocrbridge.scheduler import CleanupScheduler
from ocrbridge.tempfiles import TEMP_PREFIX


def test_start_sweeps_immediately(tmp_path: Path) -> None:
    old = tmp_path / f"{TEMP_PREFIX}1.png"
    old.write_bytes(b"x")
    stamp = time.time() - 7200
    os.utime(old, (stamp, stamp))

    async def run() -> CleanupScheduler:
        sched = CleanupScheduler(tmp_path, interval_ms=3_600_000)
        sched.start()
        for _ in range(100):
            if sched.runs:
                break
            await asyncio.sleep(0.01)
        await sched.stop()
        return sched

    sched = asyncio.run(run())
    assert sched.runs == 1
    assert not old.exists()


def test_sweep_repeats_and_survives_errors(tmp_path: Path, monkeypatch) -> None:
    calls = []

    def failing_cleanup(*args):
        calls.append(args)
        raise RuntimeError("boom")

    monkeypatch.setattr(scheduler_module, "cleanup_temp_files", failing_cleanup)

    async def run() -> CleanupScheduler:
        sched = CleanupScheduler(tmp_path, interval_ms=10)
        sched.start()
        for _ in range(200):
            if sched.runs >= 3:
                break
            await asyncio.sleep(0.01)
        await sched.stop()
        return sched

    sched = asyncio.run(run())
    assert sched.runs >= 3
    assert len(calls) >= 3
    assert calls[0] == (tmp_path, TEMP_PREFIX, 3_600_000)
