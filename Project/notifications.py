"""
In-process publish/subscribe hub for real-time order updates.

Clients connect to obtain a subscriber id, join rooms named after the entity
they watch (``order_<id>``, ``restaurant_<id>``, ``delivery_<id>``) and poll
for events. Delivery is at-most-once: nothing is persisted, a subscriber that
is not connected when an event is emitted never sees it, and a subscriber
whose buffer is full loses its oldest events first. The hub lives in the
process that built it, so under several worker processes a subscriber only
sees events emitted by the worker it polls.

The hub is owned by ``NotificationHubMiddleware`` and handed to views as
``request.notifier``; tests substitute their own instance.
"""
import copy
import itertools
import logging
import threading
import uuid
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

ORDER_SCOPE = 'order'
RESTAURANT_SCOPE = 'restaurant'
DELIVERY_SCOPE = 'delivery'
SCOPES = (ORDER_SCOPE, RESTAURANT_SCOPE, DELIVERY_SCOPE)


def room_name(scope, entity_id):
    if scope not in SCOPES:
        raise ValueError(f'Unknown room scope: {scope}')
    return f'{scope}_{entity_id}'


@dataclass(frozen=True)
class Event:
    sequence: int
    name: str
    room: str
    data: dict
    timestamp: str

    def as_dict(self):
        return {
            'sequence': self.sequence,
            'event': self.name,
            'room': self.room,
            'data': copy.deepcopy(self.data),
            'timestamp': self.timestamp,
        }


@dataclass
class Subscriber:
    subscriber_id: str
    max_pending: int
    user_id: object = None
    rooms: set = field(default_factory=set)
    dropped: int = 0

    def __post_init__(self):
        self._events = deque(maxlen=self.max_pending)

    def deliver(self, event):
        if len(self._events) == self.max_pending:
            self.dropped += 1
        self._events.append(event)

    def drain(self):
        events = list(self._events)
        self._events.clear()
        return events

    @property
    def pending(self):
        return len(self._events)


class NotificationHub:
    """Room-based fan-out with per-subscriber bounded buffers."""

    def __init__(self, max_pending=100):
        self.max_pending = max_pending
        self._subscribers = {}
        self._rooms = defaultdict(set)
        self._sequence = itertools.count(1)
        self._lock = threading.RLock()

    def connect(self, user_id=None):
        subscriber = Subscriber(subscriber_id=uuid.uuid4().hex, max_pending=self.max_pending, user_id=user_id)
        with self._lock:
            self._subscribers[subscriber.subscriber_id] = subscriber
        logger.info(f'Subscriber {subscriber.subscriber_id} connected')
        return subscriber

    def disconnect(self, subscriber_id):
        with self._lock:
            subscriber = self._subscribers.pop(subscriber_id, None)
            if subscriber is None:
                return False
            for room in subscriber.rooms:
                members = self._rooms.get(room)
                if members is not None:
                    members.discard(subscriber_id)
                    if not members:
                        del self._rooms[room]
        logger.info(f'Subscriber {subscriber_id} disconnected')
        return True

    def get(self, subscriber_id):
        with self._lock:
            return self._subscribers.get(subscriber_id)

    def join(self, subscriber_id, room):
        with self._lock:
            subscriber = self._require(subscriber_id)
            subscriber.rooms.add(room)
            self._rooms[room].add(subscriber_id)
        logger.info(f'Subscriber {subscriber_id} joined {room}')

    def leave(self, subscriber_id, room):
        with self._lock:
            subscriber = self._require(subscriber_id)
            subscriber.rooms.discard(room)
            members = self._rooms.get(room)
            if members is not None:
                members.discard(subscriber_id)
                if not members:
                    del self._rooms[room]

    def members(self, room):
        with self._lock:
            return set(self._rooms.get(room, ()))

    def emit(self, room, name, data):
        """Push an event to every current member of ``room``; returns the fan-out count."""
        with self._lock:
            event = Event(
                sequence=next(self._sequence),
                name=name,
                room=room,
                data=copy.deepcopy(data),
                timestamp=datetime.now(timezone.utc).isoformat(),
            )
            targets = [self._subscribers[sid] for sid in self._rooms.get(room, ()) if sid in self._subscribers]
            for subscriber in targets:
                subscriber.deliver(event)
        logger.debug(f'Emitted {name} to {room} ({len(targets)} subscribers)')
        return len(targets)

    def poll(self, subscriber_id):
        with self._lock:
            subscriber = self._require(subscriber_id)
            return [event.as_dict() for event in subscriber.drain()]

    def _require(self, subscriber_id):
        subscriber = self._subscribers.get(subscriber_id)
        if subscriber is None:
            raise KeyError(subscriber_id)
        return subscriber
