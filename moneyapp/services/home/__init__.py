"""
Home Service Package

Dashboard summary for the home screen.
"""

from moneyapp.services.home.service import (
    DEFAULT_RECENT_LIMIT,
    HomeService,
    start_of_month,
)

__all__ = [
    "DEFAULT_RECENT_LIMIT",
    "HomeService",
    "start_of_month",
]
