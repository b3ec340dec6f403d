"""Email port: how order confirmations leave the storefront."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str


@dataclass(frozen=True)
class DeliveryReceipt:
    delivered: bool
    message_id: str | None = None
    error: str | None = None


class EmailPort(ABC):
    """Abstract e-mail provider."""

    @abstractmethod
    def deliver(self, message: EmailMessage) -> DeliveryReceipt:
        """Hand a message to the provider.

        A provider that refuses the message returns an undelivered receipt;
        transport failures may raise.
        """
        ...
