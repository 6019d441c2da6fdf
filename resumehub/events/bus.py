"""
Event Bus

Typed publish/subscribe for in-process events.

- subscribe() is synchronous: listeners for an event type are kept in
  registration order.
- dispatch() hands the event to every listener and returns immediately.
  Listeners run on the bus's worker pool, so a slow notification never holds
  up the request that raised the event.
- Each delivery gets a CancellationToken. Long-running listeners should check
  it and stop early once it is cancelled.

Delivery is best effort: a failing listener is logged, and the failure stays
on its future. There is no retry.
"""
import asyncio
import inspect
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional, Set, Type
import logging

logger = logging.getLogger(__name__)

Handler = Callable[[Any, "CancellationToken"], Any]


class DeliveryCancelled(Exception):
    """Raised by CancellationToken.raise_if_cancelled()."""


class CancellationToken:
    """Cooperative cancellation flag shared by the deliveries of one dispatch."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise DeliveryCancelled()


class Dispatch:
    """Handle for the deliveries started by one dispatch() call."""

    def __init__(self, event: Any, token: CancellationToken, futures: List[Future]):
        self.event = event
        self.token = token
        self.futures = futures

    def done(self) -> bool:
        return all(future.done() for future in self.futures)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until every delivery finished. Returns False on timeout."""
        _, not_done = wait(self.futures, timeout=timeout)
        return not not_done

    def cancel(self) -> None:
        """Ask running listeners to stop and drop the ones not started yet."""
        self.token.cancel()
        for future in self.futures:
            future.cancel()


class EventBus:
    """Maps event types to ordered listeners and delivers on a thread pool."""

    def __init__(self, max_workers: int = 4):
        self._listeners: Dict[Type, List[Handler]] = {}
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()
        self._tokens: Set[CancellationToken] = set()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="event-bus")

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        with self._lock:
            self._listeners.setdefault(event_type, []).append(handler)
        logger.debug(f"Listener {_handler_name(handler)} subscribed to {event_type.__name__}")

    def listeners_for(self, event_type: Type) -> List[Handler]:
        with self._lock:
            return list(self._listeners.get(event_type, []))

    def dispatch(self, event: Any) -> Dispatch:
        """
        Hand event to its listeners without waiting for them.

        Events validate themselves on construction, so an invalid event never
        reaches this point.
        """
        event_type = type(event)
        handlers = self.listeners_for(event_type)
        token = CancellationToken()

        if not handlers:
            logger.debug(f"No listeners for {event_type.__name__}")
            return Dispatch(event, token, [])

        futures = []
        remaining = [len(handlers)]
        with self._lock:
            self._tokens.add(token)

        for handler in handlers:
            try:
                with self._lock:
                    future = self._executor.submit(self._deliver, handler, event, token)
                    self._pending.add(future)
            except RuntimeError as exc:
                # Pool already shut down: the remaining listeners never run
                undelivered = len(handlers) - len(futures)
                logger.warning(
                    f"{event_type.__name__} not delivered to {undelivered} listener(s): {exc}",
                    extra={"event_type": event_type.__name__}
                )
                with self._lock:
                    remaining[0] -= undelivered
                    if remaining[0] == 0:
                        self._tokens.discard(token)
                break

            futures.append(future)
            # Callbacks take the lock, so attach them after releasing it
            future.add_done_callback(self._make_done_callback(handler, event_type, token, remaining))

        logger.debug(f"Dispatched {event_type.__name__} to {len(futures)} listener(s)")
        return Dispatch(event, token, futures)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for every outstanding delivery. Returns False on timeout."""
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True, cancel: bool = False) -> None:
        """Stop the worker pool. With cancel=True, in-flight listeners are asked to stop."""
        if cancel:
            with self._lock:
                tokens = list(self._tokens)
            for token in tokens:
                token.cancel()
        self._executor.shutdown(wait=wait, cancel_futures=cancel)

    @staticmethod
    def _deliver(handler: Handler, event: Any, token: CancellationToken) -> Any:
        if token.cancelled:
            raise DeliveryCancelled()
        if inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(getattr(handler, "__call__", None)):
            return asyncio.run(handler(event, token))
        return handler(event, token)

    def _make_done_callback(
        self,
        handler: Handler,
        event_type: Type,
        token: CancellationToken,
        remaining: List[int]
    ) -> Callable[[Future], None]:
        def _done(future: Future) -> None:
            with self._lock:
                self._pending.discard(future)
                remaining[0] -= 1
                if remaining[0] == 0:
                    self._tokens.discard(token)
            if future.cancelled():
                logger.info(f"Delivery of {event_type.__name__} to {_handler_name(handler)} cancelled before start")
                return
            exc = future.exception()
            if isinstance(exc, DeliveryCancelled):
                logger.info(f"Delivery of {event_type.__name__} to {_handler_name(handler)} cancelled")
            elif exc is not None:
                logger.error(
                    f"Listener {_handler_name(handler)} failed for {event_type.__name__}: {exc}",
                    exc_info=(type(exc), exc, exc.__traceback__),
                    extra={"event_type": event_type.__name__}
                )
        return _done


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or type(handler).__name__
