"""雪花算法 ID 生成器

64 位整数布局（最高位恒为 0）：
    41 位  自 EPOCH 起的毫秒数
    10 位  worker id
    12 位  同一毫秒内的序列号
"""

import threading
import time

from storefront.core.config import settings

# 2024-01-01T00:00:00Z
EPOCH_MS = 1704067200000

WORKER_ID_BITS = 10
SEQUENCE_BITS = 12

MAX_WORKER_ID = (1 << WORKER_ID_BITS) - 1
SEQUENCE_MASK = (1 << SEQUENCE_BITS) - 1

WORKER_ID_SHIFT = SEQUENCE_BITS
TIMESTAMP_SHIFT = SEQUENCE_BITS + WORKER_ID_BITS


class SnowflakeGenerator:
    """线程安全的雪花 ID 生成器"""

    def __init__(self, worker_id: int = 0, clock=None):
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise ValueError(f"worker_id must be between 0 and {MAX_WORKER_ID}")
        self.worker_id = worker_id
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._lock = threading.Lock()
        self._last_ms = -1
        self._sequence = 0

    def _wait_until_after(self, last_ms: int) -> int:
        now = self._clock()
        while now <= last_ms:
            time.sleep(0.0001)
            now = self._clock()
        return now

    def next_id(self) -> int:
        with self._lock:
            now = self._clock()

            # 时钟回拨：等待追上上一次的时间戳
            if now < self._last_ms:
                now = self._wait_until_after(self._last_ms - 1)

            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & SEQUENCE_MASK
                if self._sequence == 0:
                    # 本毫秒序列号耗尽
                    now = self._wait_until_after(self._last_ms)
            else:
                self._sequence = 0

            self._last_ms = now
            return (
                ((now - EPOCH_MS) << TIMESTAMP_SHIFT)
                | (self.worker_id << WORKER_ID_SHIFT)
                | self._sequence
            )


generator = SnowflakeGenerator(worker_id=settings.ID_WORKER_ID)


def next_id() -> int:
    return generator.next_id()
