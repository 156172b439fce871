"""
Prompt templates for tracking number and description extraction.
"""

import json

MAX_PROMPT_BODY_LENGTH = 2000
MAX_DESCRIPTION_BODY_LENGTH = 1500

TRACKING_FORMATS = """\
- UPS: starts with 1Z, 18 characters (1Z999AA1234567890)
- USPS: 20-22 digits, usually starting with 94, 93, 92 or 82
- FedEx: 12 digits, or 15 digits starting with 96
- DHL: 10-11 digits
- Amazon Logistics: TBA followed by 12 digits (TBA123456789000)
- Amazon order: 3-7-7 digits with dashes (123-4567890-1234567)"""

# (sender, subject, body, expected entries)
FEW_SHOT_EXAMPLES: list[tuple[str, str, str, list[dict]]] = [
    (
        "noreply@amazon.com",
        "Your Amazon order has shipped",
        "Your order of Apple iPhone 15 Pro 256GB Space Black has been shipped "
        "via UPS. Tracking number: 1Z999AA1234567890",
        [
            {
                "number": "1Z999AA1234567890",
                "carrier": "ups",
                "confidence": 0.95,
                "description": "Apple iPhone 15 Pro 256GB Space Black",
                "merchant": "Amazon",
            }
        ],
    ),
    (
        "orders@techstore.com",
        "Order Confirmation - Dell Laptop",
        "Thank you for your order. Dell XPS 13 Laptop, Intel i7, 16GB RAM. "
        "Ships via FedEx, tracking 961234567890.",
        [
            {
                "number": "961234567890",
                "carrier": "fedex",
                "confidence": 0.9,
                "description": "Dell XPS 13 Laptop, Intel i7, 16GB RAM",
                "merchant": "TechStore",
            }
        ],
    ),
    (
        "shipping@bestbuy.com",
        "Your Best Buy order is on its way",
        "Nike Air Max 270 Running Shoes - Size 10 shipped with USPS. "
        "Track it with 9405511206213414325732.",
        [
            {
                "number": "9405511206213414325732",
                "carrier": "usps",
                "confidence": 0.92,
                "description": "Nike Air Max 270 Running Shoes - Size 10",
                "merchant": "Best Buy",
            }
        ],
    ),
    (
        "shipment-tracking@amazon.com",
        "Your package is out for delivery",
        "Echo Dot (5th Gen) Smart Speaker is out for delivery with Amazon "
        "Logistics. Tracking ID: TBA123456789000",
        [
            {
                "number": "TBA123456789000",
                "carrier": "amazon",
                "confidence": 0.93,
                "description": "Echo Dot (5th Gen) Smart Speaker",
                "merchant": "Amazon",
            }
        ],
    ),
    (
        "auto-confirm@amazon.com",
        "Your Amazon.com order",
        "Order #111-2233445-6677889: Fire TV Stick 4K Max has shipped.",
        [
            {
                "number": "111-2233445-6677889",
                "carrier": "amazon",
                "confidence": 0.85,
                "description": "Fire TV Stick 4K Max",
                "merchant": "Amazon",
            }
        ],
    ),
]


def truncate_body(body: str, limit: int = MAX_PROMPT_BODY_LENGTH) -> str:
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


def _render_examples() -> str:
    blocks = []
    for i, (sender, subject, body, entries) in enumerate(FEW_SHOT_EXAMPLES, start=1):
        expected = json.dumps({"tracking_numbers": entries}, indent=2)
        blocks.append(
            f"Example {i}:\nFrom: {sender}\nSubject: {subject}\nContent: {body}\n"
            f"Expected output:\n{expected}"
        )
    return "\n\n".join(blocks)


def build_tracking_prompt(sender: str, subject: str, body: str) -> str:
    """
    Build the few-shot tracking extraction prompt.

    The body is expected to be sanitized already; it is truncated here.
    """
    return f"""Extract shipping tracking numbers, product descriptions and merchant information from this email. Return ONLY a JSON response.

Email From: {sender}
Subject: {subject}
Content: {truncate_body(body)}

Tracking number formats:
{TRACKING_FORMATS}

For each tracking number found:
1. Extract the number and identify the carrier
2. Describe the purchased product in a few words
3. Name the merchant or retailer that sold it
4. Assign a confidence score between 0.0 and 1.0

{_render_examples()}

Return JSON in this format:
{{
  "tracking_numbers": [
    {{
      "number": "tracking_number_here",
      "carrier": "ups|usps|fedex|dhl|amazon",
      "confidence": 0.95,
      "description": "product description",
      "merchant": "merchant name"
    }}
  ]
}}

If no tracking numbers are found, return {{"tracking_numbers": []}}."""


def build_description_prompt(email_content: str, tracking_number: str) -> str:
    """Build the narrower prompt that only asks for a product description."""
    return f"""Identify the product shipped under tracking number {tracking_number} in this email. Return ONLY a JSON response.

Email content:
{truncate_body(email_content, MAX_DESCRIPTION_BODY_LENGTH)}

Return JSON in this format:
{{
  "description": "short product description, or empty if unknown",
  "merchant": "merchant or retailer name, or empty if unknown",
  "confidence": 0.0
}}"""
