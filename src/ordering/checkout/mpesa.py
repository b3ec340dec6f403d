"""M-Pesa confirmation parsing.

Buyers pay the till number themselves and paste the confirmation SMS back
into checkout. The transaction code and paying phone number are pulled out
of that text heuristically; the manual fields are only a fallback for when
the message does not contain them. Staff verify the payment by hand later.
"""

import re
from dataclasses import dataclass

from protean.exceptions import ValidationError

from ordering.settings import get_settings

MIN_MESSAGE_LENGTH = 10

_CODE_RE = re.compile(r"[A-Z0-9]{10}")
_PHONE_RE = re.compile(r"(?:254|0)\d{9}")


@dataclass(frozen=True)
class MpesaConfirmation:
    code: str
    phone: str
    message: str


@dataclass(frozen=True)
class PaymentInstructions:
    till_number: str
    business_name: str
    amount_due: float


def can_submit(message: str | None) -> bool:
    """The only gate: at least ten non-whitespace-padded characters."""
    return len((message or "").strip()) >= MIN_MESSAGE_LENGTH


def parse(message: str | None, manual_code: str | None = "", manual_phone: str | None = "") -> MpesaConfirmation:
    """Extract the transaction code and phone from a pasted confirmation.

    Raises ``ValidationError`` when the message is too short, whatever the
    manual fields contain.
    """
    if not can_submit(message):
        raise ValidationError(
            {"mpesa_message": [f"Paste the M-Pesa confirmation message (at least {MIN_MESSAGE_LENGTH} characters)"]}
        )

    text = message.strip()
    code_match = _CODE_RE.search(text)
    phone_match = _PHONE_RE.search(text)

    return MpesaConfirmation(
        code=code_match.group(0) if code_match else (manual_code or "").strip().upper(),
        phone=phone_match.group(0) if phone_match else (manual_phone or "").strip(),
        message=text,
    )


def payment_instructions(amount_due: float) -> PaymentInstructions:
    settings = get_settings()
    return PaymentInstructions(
        till_number=settings.mpesa_till_number,
        business_name=settings.business_name,
        amount_due=amount_due,
    )
