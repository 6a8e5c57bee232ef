from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

from budgetcore import config

__all__ = [
    'BUDGET_WARNING', 'BUDGET_CRITICAL', 'REPORT_READY',
    'Event', 'EventBus', 'register_default_handlers',
]

BUDGET_WARNING = "BUDGET_WARNING"
BUDGET_CRITICAL = "BUDGET_CRITICAL"
REPORT_READY = "REPORT_READY"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    """Synchronous publish/subscribe hook for the notification collaborator."""

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event], dict]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Callable[[Event], dict]) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event) for handler in list(handlers)]


def budget_alert_handler(event: Event) -> dict:
    p = event.payload
    severity = "critical" if event.name == BUDGET_CRITICAL else "warning"
    period = p.get("period", "")
    if severity == "critical":
        title = f"{period.capitalize()} budget exceeded"
    else:
        title = f"{period.capitalize()} budget almost used"
    return {
        "type": "budget_alert",
        "severity": severity,
        "title": title,
        "message": (
            f"{config.CURRENCY_SYMBOL}{p.get('spent', 0):,.2f} spent of "
            f"{config.CURRENCY_SYMBOL}{p.get('budget', 0):,.2f} "
            f"({p.get('percentageUsed', 0):.0f}%)"
        ),
    }


def report_ready_handler(event: Event) -> dict:
    p = event.payload
    if p.get("empty"):
        return {"type": "report", "skip": True}
    return {"type": "report", "skip": False, "subject": p.get("subject", "")}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(BUDGET_WARNING, budget_alert_handler)
    bus.subscribe(BUDGET_CRITICAL, budget_alert_handler)
    bus.subscribe(REPORT_READY, report_ready_handler)
    return bus
