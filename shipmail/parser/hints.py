"""
Carrier hint analysis.

Scores which carriers an email is likely about from its sender domain,
subject keywords and body mention counts. Also answers the marketplace
context and sender questions the extractor asks when ordering validation
and deciding on inference fallback.
"""

from shipmail.models.email import Carrier, CarrierHint, EmailContent, HintSource

SENDER_HINT_CONFIDENCE = 0.9
VENDOR_HINT_CONFIDENCE = 0.6
SUBJECT_CARRIER_CONFIDENCE = 0.7
SUBJECT_AMAZON_TERM_CONFIDENCE = 0.8
SUBJECT_SHIPPING_TERM_CONFIDENCE = 0.4
CONTENT_BASE_CONFIDENCE = 0.5
CONTENT_PER_MENTION = 0.1
CONTENT_MAX_CONFIDENCE = 0.8

CARRIER_SENDER_DOMAINS: dict[Carrier, tuple[str, ...]] = {
    Carrier.UPS: ("ups.com", "quantum.ups.com", "pkginfo.ups.com"),
    Carrier.USPS: ("usps.com", "email.usps.com", "informeddelivery.usps.com"),
    Carrier.FEDEX: ("fedex.com", "tracking.fedex.com", "shipment.fedex.com"),
    Carrier.DHL: ("dhl.com", "noreply.dhl.com", "dhl.de"),
    Carrier.AMAZON: (
        "amazon.com",
        "shipment-tracking.amazon.com",
        "marketplace.amazon.com",
        "amazonlogistics.com",
    ),
}

# Vendors that often send shipping info for another carrier
VENDOR_DOMAINS = ("amazon.com", "shopify.com", "ebay.com", "etsy.com")

# Senders that skip the inference fallback on their own
KNOWN_CARRIER_DOMAINS = ("ups.com", "usps.com", "fedex.com", "dhl.com")

CARRIER_KEYWORDS: tuple[Carrier, ...] = (
    Carrier.UPS,
    Carrier.USPS,
    Carrier.FEDEX,
    Carrier.DHL,
    Carrier.AMAZON,
)

SUBJECT_AMAZON_TERMS = ("amazon logistics", "amzl", "order shipped", "order update")
CONTENT_AMAZON_TERMS = ("amazon logistics", "amzl", "order number", "amazon.com")
SHIPPING_TERMS = ("tracking", "shipment", "package", "delivery", "shipped")

AMAZON_CONTEXT_DOMAINS = (
    "amazon.com",
    "amazonlogistics.com",
    "marketplace.amazon.com",
    "shipment-tracking.amazon.com",
)
AMAZON_CONTEXT_TERMS = ("amazon", "amazon logistics", "amzl")


def identify_carriers(content: EmailContent) -> list[CarrierHint]:
    """
    Collect carrier hints from all channels of a preprocessed email.

    Every hint is kept; the list is sorted by descending confidence with
    ties left in channel order (sender, subject, content).
    """
    hints: list[CarrierHint] = []
    hints.extend(analyze_sender(content.sender))
    hints.extend(analyze_subject(content.subject))
    hints.extend(analyze_content(content.plain_text))
    hints.sort(key=lambda hint: hint.confidence, reverse=True)
    return hints


def analyze_sender(sender: str) -> list[CarrierHint]:
    hints: list[CarrierHint] = []
    sender = sender.lower()

    for carrier, domains in CARRIER_SENDER_DOMAINS.items():
        for domain in domains:
            if domain in sender:
                hints.append(
                    CarrierHint(
                        carrier=carrier,
                        confidence=SENDER_HINT_CONFIDENCE,
                        source=HintSource.SENDER,
                        reason=f"From {domain} domain",
                    )
                )
                break

    for vendor in VENDOR_DOMAINS:
        if vendor in sender:
            hints.append(
                CarrierHint(
                    carrier=Carrier.UNKNOWN,
                    confidence=VENDOR_HINT_CONFIDENCE,
                    source=HintSource.SENDER,
                    reason=f"From vendor {vendor}",
                )
            )

    return hints


def analyze_subject(subject: str) -> list[CarrierHint]:
    hints: list[CarrierHint] = []
    subject = subject.lower()

    for carrier in CARRIER_KEYWORDS:
        if carrier.value in subject:
            hints.append(
                CarrierHint(
                    carrier=carrier,
                    confidence=SUBJECT_CARRIER_CONFIDENCE,
                    source=HintSource.SUBJECT,
                    reason=f"Contains '{carrier.value}'",
                )
            )

    for term in SUBJECT_AMAZON_TERMS:
        if term in subject:
            hints.append(
                CarrierHint(
                    carrier=Carrier.AMAZON,
                    confidence=SUBJECT_AMAZON_TERM_CONFIDENCE,
                    source=HintSource.SUBJECT,
                    reason=f"Contains Amazon term '{term}'",
                )
            )

    for term in SHIPPING_TERMS:
        if term in subject:
            hints.append(
                CarrierHint(
                    carrier=Carrier.UNKNOWN,
                    confidence=SUBJECT_SHIPPING_TERM_CONFIDENCE,
                    source=HintSource.SUBJECT,
                    reason=f"Contains '{term}'",
                )
            )

    return hints


def analyze_content(text: str) -> list[CarrierHint]:
    """Turn carrier mention counts in the body into capped hints."""
    text = text.lower()
    counts: dict[Carrier, int] = {}

    for carrier in CARRIER_KEYWORDS:
        count = text.count(carrier.value)
        if count > 0:
            counts[carrier] = count

    amazon_count = sum(text.count(term) for term in CONTENT_AMAZON_TERMS)
    if amazon_count > 0:
        counts[Carrier.AMAZON] = counts.get(Carrier.AMAZON, 0) + amazon_count

    return [
        CarrierHint(
            carrier=carrier,
            confidence=min(
                CONTENT_BASE_CONFIDENCE + count * CONTENT_PER_MENTION,
                CONTENT_MAX_CONFIDENCE,
            ),
            source=HintSource.CONTENT,
            reason=f"Mentioned {count} times",
        )
        for carrier, count in counts.items()
    ]


def is_amazon_email_context(content: EmailContent) -> bool:
    """True when the sender domain or subject points at Amazon."""
    sender = content.sender.lower()
    if any(domain in sender for domain in AMAZON_CONTEXT_DOMAINS):
        return True

    subject = content.subject.lower()
    return any(term in subject for term in AMAZON_CONTEXT_TERMS)


def is_known_carrier_sender(sender: str) -> bool:
    sender = sender.lower()
    return any(domain in sender for domain in KNOWN_CARRIER_DOMAINS)
