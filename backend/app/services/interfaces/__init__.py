"""
Notification channel interface and its default implementation.
"""

from .notifier import BookingNotifier, BookingSummary
from .log_notifier import LogNotifier

__all__ = ['BookingNotifier', 'BookingSummary', 'LogNotifier']
