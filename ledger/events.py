import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from ledger.functional import amount_or_zero

__all__ = [
    'EventBus', 'Event', 'TRANSACTION_ADDED', 'TRANSACTION_DELETED', 'GOAL_UPDATED',
    'balance_delta_handler', 'register_default_handlers',
]

logger = logging.getLogger(__name__)

TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"
GOAL_UPDATED = "GOAL_UPDATED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("publishing %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in handlers]


def balance_delta_handler(event: Event, payload: dict) -> dict:
    """Balance change implied by a transaction event.

    Adding a transaction moves the account by its amount; deleting it
    reverses that move.
    """
    amount = amount_or_zero(payload.get("amount"))
    if event.name == TRANSACTION_DELETED:
        amount = -amount
    return {"account_id": payload.get("account_id"), "balance_delta": amount}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(TRANSACTION_ADDED, balance_delta_handler)
    bus.subscribe(TRANSACTION_DELETED, balance_delta_handler)
    return bus
