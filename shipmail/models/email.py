from datetime import datetime, timezone
from email.message import Message
from email.utils import parsedate_to_datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Carrier(StrEnum):
    """Supported shipping carriers"""

    UPS = "ups"
    USPS = "usps"
    FEDEX = "fedex"
    DHL = "dhl"
    AMAZON = "amazon"  # Amazon Logistics and Amazon internal references
    UNKNOWN = "unknown"


# Order in which carriers are tried when a candidate has no suggestion
STANDARD_CARRIER_ORDER: tuple[Carrier, ...] = (
    Carrier.UPS,
    Carrier.USPS,
    Carrier.FEDEX,
    Carrier.DHL,
    Carrier.AMAZON,
)


class TrackingSource(StrEnum):
    """Provenance of an extracted tracking number"""

    REGEX = "regex"  # Pattern catalog + carrier validation
    LLM = "llm"  # Inference extractor
    HYBRID = "hybrid"  # Both sources agreed


class HintSource(StrEnum):
    """Email channel a carrier hint was derived from"""

    SENDER = "sender"
    SUBJECT = "subject"
    CONTENT = "content"


class DetectionMethod(StrEnum):
    """How a pattern located a candidate"""

    DIRECT = "direct"
    LABELED = "labeled"
    TABLE = "table"
    FORMATTED = "formatted"  # Spaced formats
    CONTEXTUAL = "contextual"


class EmailContent(BaseModel):
    """Shipment notification email as handed to the extractor"""

    model_config = ConfigDict(frozen=True)

    sender: str = Field(default="", description="Sender address (From header)")
    subject: str = Field(default="", description="Subject line")
    plain_text: str = Field(default="", description="Plain-text body")
    html_text: str = Field(default="", description="HTML body")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Raw message headers"
    )
    message_id: Optional[str] = Field(default=None, description="Message ID")
    thread_id: Optional[str] = Field(default=None, description="Thread ID")
    date: Optional[datetime] = Field(default=None, description="Message timestamp")

    @classmethod
    def from_message(cls, msg: Message) -> "EmailContent":
        """Build email content from a stdlib email message."""
        plain_parts: list[str] = []
        html_parts: list[str] = []

        for part in msg.walk():
            if part.is_multipart() or part.get_filename():
                continue
            content_type = part.get_content_type()
            if content_type not in ("text/plain", "text/html"):
                continue

            payload = part.get_payload(decode=True)
            if payload is None:
                continue
            charset = part.get_content_charset() or "utf-8"
            text = payload.decode(charset, errors="replace")

            if content_type == "text/plain":
                plain_parts.append(text)
            else:
                html_parts.append(text)

        date = None
        if msg.get("Date"):
            try:
                date = parsedate_to_datetime(msg["Date"])
            except (TypeError, ValueError):
                date = None

        return cls(
            sender=str(msg.get("From", "")),
            subject=str(msg.get("Subject", "")),
            plain_text="\n".join(plain_parts),
            html_text="\n".join(html_parts),
            headers={key: str(value) for key, value in msg.items()},
            message_id=msg.get("Message-ID"),
            thread_id=msg.get("Thread-Index") or msg.get("In-Reply-To"),
            date=date,
        )


class CarrierHint(BaseModel):
    """Weighted guess about which carrier an email concerns"""

    carrier: Carrier = Field(description="Suggested carrier")
    confidence: float = Field(ge=0.0, le=1.0, description="Hint weight")
    source: HintSource = Field(description="Channel the hint came from")
    reason: str = Field(default="", description="Why the carrier was suggested")


class TrackingCandidate(BaseModel):
    """Substring that might be a tracking number, before validation"""

    text: str = Field(description="Matched text")
    position: int = Field(default=0, ge=0, description="Character offset in source")
    context: str = Field(default="", description="Surrounding text")
    carrier: Carrier = Field(default=Carrier.UNKNOWN, description="Suggested carrier")
    confidence: float = Field(ge=0.0, le=1.0, description="Base confidence")
    method: DetectionMethod = Field(
        default=DetectionMethod.DIRECT, description="Detection method"
    )


class TrackingInfo(BaseModel):
    """Extracted tracking number (final output unit)"""

    number: str = Field(description="Normalized tracking number")
    carrier: Carrier = Field(description="Validated carrier")
    confidence: float = Field(ge=0.0, le=1.0, description="Final confidence")
    source: TrackingSource = Field(description="Provenance")
    description: str = Field(default="", description="Product description")
    merchant: str = Field(default="", description="Merchant/retailer name")
    context: str = Field(default="", description="Where it was found in the email")
    extracted_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Extraction timestamp",
    )
