"""Simulated upload for when the real upload endpoint is not ready."""

import logging
import math
import time
from collections.abc import Callable

from symbolup.models import ProgressInfo, UploadRequest

logger = logging.getLogger(__name__)

MOCK_RATE_MBPS = 25
MOCK_TICK_SECONDS = 0.05


def upload_mock(
    request: UploadRequest,
    *,
    rate_mbps: float = MOCK_RATE_MBPS,
    tick: float = MOCK_TICK_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Pretend to upload request.file at a fixed rate, without touching the network.

    Progress is reported once per tick from the simulated elapsed time. The
    final tick always reports the full file size.

    Args:
        request: Upload request; only file and on_progress are used
        rate_mbps: Simulated bandwidth in megabits per second
        tick: Seconds between progress reports
        sleep: Sleep function, replaceable in tests
    """
    total = request.file.path.stat().st_size
    bytes_per_second = rate_mbps * 1_000_000 / 8
    duration = total / bytes_per_second
    ticks = math.ceil(duration / tick)

    logger.debug(f"Mock upload of {request.file.path}: {total} bytes over {duration:.2f}s")

    for i in range(1, ticks + 1):
        if i < ticks:
            sleep(tick)
            loaded = min(total, math.floor(i * tick * bytes_per_second))
        else:
            sleep(max(0.0, duration - (ticks - 1) * tick))
            loaded = total

        if request.on_progress:
            request.on_progress(ProgressInfo.from_bytes(loaded, total))
