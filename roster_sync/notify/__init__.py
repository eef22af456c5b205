from .notifier import LogNotifier, Notifier, SmtpNotifier, build_notifier, compose_message

__all__ = ["LogNotifier", "Notifier", "SmtpNotifier", "build_notifier", "compose_message"]
