"""
Canvas Notifier Bot

Polls the Canvas LMS API for upcoming assignment deadlines and grade
changes across favorited courses and sends Telegram notifications.
"""

__version__ = "1.0.0"
