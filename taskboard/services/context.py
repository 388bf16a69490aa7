"""Clock and actor context handed to every mutation."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from taskboard.models.domain import utcnow

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class ActorContext:
    """Who is acting, and what time it is for them."""
    actor_id: str
    now: Clock = field(default=utcnow)
