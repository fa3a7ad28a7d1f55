"""Live decision engine: periodic ticks over a growing price buffer."""

from tradelab.live.scheduler import PeriodicTask
from tradelab.live.session import LiveSession

__all__ = ["PeriodicTask", "LiveSession"]
