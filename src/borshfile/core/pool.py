"""Reusable codec instance pools.

A pool is a free-list: acquire() pops an idle instance or builds a new one,
release() pushes it back. Nobody ever waits for another borrower; under load
the pool simply grows (unless max_size is set, then PoolExhaustedError).

Compressors and decompressors live in separate pools (CodecPools), an
instance never crosses roles.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from borshfile.core.codec_zstd import CodecZstd
from borshfile.errors import PoolExhaustedError

T = TypeVar("T")

ROLE_COMPRESS = "compress"
ROLE_DECOMPRESS = "decompress"


class CodecPool(Generic[T]):
    def __init__(
        self,
        factory: Callable[[], T],
        *,
        role: str,
        max_size: Optional[int] = None,
    ):
        if max_size is not None and int(max_size) <= 0:
            raise ValueError(f"CodecPool: max_size must be > 0, got {max_size}")
        self.factory = factory
        self.role = str(role)
        self.max_size = None if max_size is None else int(max_size)
        self._lock = threading.Lock()
        self._idle: list[T] = []
        # id(instance) -> instance, for everything this pool ever built
        self._owned: dict[int, T] = {}
        self._borrowed: set[int] = set()
        self._reserved = 0

    @property
    def created(self) -> int:
        with self._lock:
            return len(self._owned)

    @property
    def idle(self) -> int:
        with self._lock:
            return len(self._idle)

    @property
    def in_use(self) -> int:
        with self._lock:
            return len(self._borrowed)

    def acquire(self) -> T:
        with self._lock:
            if self._idle:
                inst = self._idle.pop()
                self._borrowed.add(id(inst))
                return inst
            total = len(self._owned) + self._reserved
            if self.max_size is not None and total >= self.max_size:
                raise PoolExhaustedError(
                    f"{self.role} pool exhausted: {len(self._borrowed)} of {self.max_size} in use"
                )
            self._reserved += 1

        # Construction is the expensive part: keep it outside the lock.
        try:
            inst = self.factory()
        except BaseException:
            with self._lock:
                self._reserved -= 1
            raise

        with self._lock:
            self._reserved -= 1
            self._owned[id(inst)] = inst
            self._borrowed.add(id(inst))
        return inst

    def release(self, inst: T) -> None:
        with self._lock:
            key = id(inst)
            if self._owned.get(key) is not inst:
                raise ValueError(f"{self.role} pool: release of an instance it did not create")
            if key not in self._borrowed:
                raise ValueError(f"{self.role} pool: instance released twice")
            self._borrowed.discard(key)
            self._idle.append(inst)

    @contextmanager
    def borrow(self) -> Iterator[T]:
        inst = self.acquire()
        try:
            yield inst
        finally:
            self.release(inst)

    def __repr__(self) -> str:
        return (
            f"CodecPool(role={self.role!r}, created={self.created}, "
            f"idle={self.idle}, max_size={self.max_size})"
        )


@dataclass(frozen=True)
class CodecPools:
    """Role-separated pool pair for one codec."""

    codec: Any
    compressors: CodecPool[Any]
    decompressors: CodecPool[Any]

    @classmethod
    def for_codec(cls, codec: Any, *, max_size: Optional[int] = None) -> "CodecPools":
        return cls(
            codec=codec,
            compressors=CodecPool(codec.new_compressor, role=ROLE_COMPRESS, max_size=max_size),
            decompressors=CodecPool(
                codec.new_decompressor, role=ROLE_DECOMPRESS, max_size=max_size
            ),
        )

    @property
    def errors(self) -> tuple[type[BaseException], ...]:
        return tuple(getattr(self.codec, "errors", ()))


# Process-wide defaults: built lazily, never torn down.
_default_lock = threading.Lock()
_default_pools: Optional[CodecPools] = None


def default_pools() -> CodecPools:
    global _default_pools
    with _default_lock:
        if _default_pools is None:
            _default_pools = CodecPools.for_codec(CodecZstd())
        return _default_pools


def set_default_pools(pools: Optional[CodecPools]) -> None:
    """Replace the process-wide pools. None resets to lazy zstd defaults."""
    global _default_pools
    with _default_lock:
        _default_pools = pools
