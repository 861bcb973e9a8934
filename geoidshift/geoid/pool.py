"""Per-thread pooled transformations for high-throughput callers."""
from __future__ import annotations

import logging
import threading
import weakref
from typing import List

from ..common_core import EllipsoidalPosition, OrthometricPosition
from ..errors import ReleasedResourceError
from .context import ContextConfig, GeodeticContext
from .vertical import BatchResult, VerticalTransformation

log = logging.getLogger(__name__)


class _ThreadToken:
    """Held only by the pool's thread-local storage; collected when its thread exits."""

    __slots__ = ("__weakref__",)


def _retire(pool_ref: "weakref.ReferenceType[TransformationPool]", ctx: GeodeticContext) -> None:
    pool = pool_ref()
    if pool is not None:
        pool._discard(ctx)
    ctx.release()


class TransformationPool:
    """
    Same contract as `VerticalTransformation.apply`, but every calling thread
    lazily gets its own context and transformation. Nothing is shared between
    threads, so callers need no locking. A thread's context is released when
    the thread exits, or by `close()`, whichever comes first.
    """

    def __init__(self, config: ContextConfig | None = None):
        self.config = config or ContextConfig()
        self._local = threading.local()
        # reentrant: a finalizer may fire from gc while this thread holds it
        self._lock = threading.RLock()
        self._contexts: List[GeodeticContext] = []
        self._closed = False

    def transformation(self) -> VerticalTransformation:
        if self._closed:
            raise ReleasedResourceError("Transformation pool has been closed")
        ctx = getattr(self._local, "context", None)
        if ctx is None or not ctx.live:
            ctx = GeodeticContext.acquire(self.config)
            with self._lock:
                if self._closed:
                    ctx.release()
                    raise ReleasedResourceError("Transformation pool has been closed")
                self._contexts.append(ctx)
            token = _ThreadToken()
            weakref.finalize(token, _retire, weakref.ref(self), ctx)
            self._local.context = ctx
            self._local.token = token
            log.debug("Pool acquired context for thread %s", threading.current_thread().name)
        return ctx.vertical()

    def _discard(self, ctx: GeodeticContext) -> None:
        with self._lock:
            if ctx in self._contexts:
                self._contexts.remove(ctx)
                log.debug("Pool released context of a finished thread")

    def apply(self, position: OrthometricPosition) -> EllipsoidalPosition:
        return self.transformation().apply(position)

    def apply_array(self, latitude, longitude, height) -> BatchResult:
        return self.transformation().apply_array(latitude, longitude, height)

    @property
    def size(self) -> int:
        with self._lock:
            return sum(1 for ctx in self._contexts if ctx.live)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            contexts, self._contexts = self._contexts, []
        for ctx in contexts:
            ctx.release()

    def __enter__(self) -> "TransformationPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
