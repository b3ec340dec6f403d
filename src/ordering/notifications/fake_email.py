"""Fake email adapter: keeps an outbox for test assertions."""

from ordering.notifications.email_port import DeliveryReceipt, EmailMessage, EmailPort


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.outbox: list[EmailMessage] = []
        self.rejection: str | None = None
        self.error: Exception | None = None

    def reject(self, reason: str = "Mailbox unavailable") -> None:
        """Refuse every following message with ``reason``."""
        self.rejection = reason

    def fail(self, error: Exception | None = None) -> None:
        """Raise ``error`` on every following delivery."""
        self.error = error or ConnectionError("Email provider unreachable")

    def deliver(self, message: EmailMessage) -> DeliveryReceipt:
        if self.error is not None:
            raise self.error
        if self.rejection is not None:
            return DeliveryReceipt(delivered=False, error=self.rejection)

        self.outbox.append(message)
        return DeliveryReceipt(delivered=True, message_id=f"mail-{len(self.outbox)}")

    def reset(self) -> None:
        self.outbox.clear()
        self.rejection = None
        self.error = None
