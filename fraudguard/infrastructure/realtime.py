"""In-process publish/subscribe hub for backend change events"""

import asyncio
import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from fraudguard.infrastructure.observability.metrics import realtime_event_counter

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
ANY = "*"


@dataclass
class ChangeEvent:
    """One row change, shaped like a database webhook payload"""

    table: str
    type: str
    record: Dict[str, Any] = field(default_factory=dict)
    old_record: Optional[Dict[str, Any]] = None


Handler = Callable[[ChangeEvent], Union[None, Awaitable[None]]]


class Subscription:
    """Handle returned by RealtimeHub.subscribe; close() deregisters it"""

    def __init__(self, hub: "RealtimeHub", table: str, event: str, row_filter: Optional[Tuple[str, Any]], handler: Handler):
        self.hub = hub
        self.table = table
        self.event = event
        self.row_filter = row_filter
        self.handler = handler
        self.active = True

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.event != ANY and change.type != self.event:
            return False
        if self.row_filter is not None:
            column, value = self.row_filter
            row = change.record or change.old_record or {}
            return str(row.get(column)) == str(value)
        return True

    def close(self) -> None:
        if self.active:
            self.active = False
            self.hub._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class RealtimeHub:
    """
    Routes change events to subscribers keyed by table, event type and an
    optional column=value row filter.
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def subscribe(
        self,
        table: str,
        handler: Handler,
        event: str = ANY,
        row_filter: Optional[Tuple[str, Any]] = None,
    ) -> Subscription:
        subscription = Subscription(self, table, event, row_filter, handler)
        self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def publish(self, change: ChangeEvent) -> int:
        """Deliver a change to every matching subscriber; returns deliveries made"""
        realtime_event_counter.labels(table=change.table, event=change.type).inc()
        delivered = 0
        # Snapshot: handlers may unsubscribe while being called
        for subscription in list(self._subscriptions):
            if not subscription.active or not subscription.matches(change):
                continue
            try:
                result = subscription.handler(change)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception(
                    "Realtime handler failed",
                    extra={"table": change.table, "event": change.type},
                )
        return delivered

    def close_all(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.close()


class MessageLog:
    """
    Case chat messages kept in sync from change events.

    Duplicate INSERT deliveries are ignored by message_id; UPDATEs replace
    the stored row in place.
    """

    def __init__(self, case_id: Optional[int] = None):
        self.case_id = case_id
        self.messages: List[Dict[str, Any]] = []
        self._subscriptions: List[Subscription] = []

    def attach(self, hub: RealtimeHub) -> None:
        row_filter = ("case_id", self.case_id) if self.case_id is not None else None
        self._subscriptions = [
            hub.subscribe("case_messages", self.apply, event=INSERT, row_filter=row_filter),
            hub.subscribe("case_messages", self.apply, event=UPDATE, row_filter=row_filter),
        ]

    def detach(self) -> None:
        for subscription in self._subscriptions:
            subscription.close()
        self._subscriptions = []

    def apply(self, change: ChangeEvent) -> None:
        message_id = change.record.get("message_id")
        if message_id is None:
            return
        if change.type == INSERT:
            if any(m.get("message_id") == message_id for m in self.messages):
                return
            self.messages.append(change.record)
        elif change.type == UPDATE:
            self.messages = [
                change.record if m.get("message_id") == message_id else m
                for m in self.messages
            ]


class RealtimeService:
    """Long-lived owner of the hub; subscribes on start, deregisters on stop"""

    def __init__(self, hub: Optional[RealtimeHub] = None):
        self.hub = hub or RealtimeHub()
        self._owned: List[Subscription] = []
        self._tasks: set = set()
        self._logs: Dict[int, MessageLog] = {}
        self.started = False

    def start(self, on_case_change: Optional[Callable[[], Awaitable[Any]]] = None) -> None:
        if self.started:
            return
        if on_case_change is not None:
            def _schedule(_change: ChangeEvent) -> None:
                # Refresh runs detached from event delivery
                task = asyncio.ensure_future(on_case_change())
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)

            self._owned.append(self.hub.subscribe("fraud_cases", _schedule, event=UPDATE))
        self.started = True

    def watch(self, table: str, handler: Handler, event: str = ANY, row_filter: Optional[Tuple[str, Any]] = None) -> Subscription:
        subscription = self.hub.subscribe(table, handler, event=event, row_filter=row_filter)
        self._owned.append(subscription)
        return subscription

    def follow_case(self, case_id: int) -> MessageLog:
        """Message log of one case, attached to the hub on first use"""
        log = self._logs.get(case_id)
        if log is None:
            log = MessageLog(case_id)
            log.attach(self.hub)
            self._logs[case_id] = log
        return log

    async def stop(self) -> None:
        for subscription in self._owned:
            subscription.close()
        self._owned = []
        for log in self._logs.values():
            log.detach()
        self._logs.clear()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        self.started = False
