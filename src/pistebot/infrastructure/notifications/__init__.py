from .logging_notifier import LoggingNotifier, RecordingNotifier
from .telegram_notifier import TelegramNotifier

__all__ = ["LoggingNotifier", "RecordingNotifier", "TelegramNotifier"]
