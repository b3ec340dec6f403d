"""Email sender factory.

Provides get_email_sender() / set_email_sender() to swap implementations.
Defaults to FakeEmailAdapter until a real provider is configured.
"""

from ordering.notifications.email_port import EmailPort
from ordering.notifications.fake_email import FakeEmailAdapter

_current_sender: EmailPort | None = None


def get_email_sender() -> EmailPort:
    """Return the current email sender. Defaults to FakeEmailAdapter."""
    global _current_sender
    if _current_sender is None:
        _current_sender = FakeEmailAdapter()
    return _current_sender


def set_email_sender(sender: EmailPort) -> None:
    """Override the active email sender (useful for tests)."""
    global _current_sender
    _current_sender = sender


def reset_email_sender() -> None:
    """Reset to default sender."""
    global _current_sender
    _current_sender = None
