"""
Polling Package

Fixed-interval refresh loop with cooperative stop.
"""

from moneyapp.polling.controller import PollEvent, PollingController

__all__ = [
    "PollEvent",
    "PollingController",
]
