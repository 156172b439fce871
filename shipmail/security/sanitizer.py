"""
Prompt-injection sanitization for email content.

Email bodies are attacker-controlled text that ends up inside model
prompts. The sanitizer strips known injection phrases, chat-template
delimiters, script payloads and runaway repetition, then normalizes and
bounds what is left. `validate_content_safety` is the stricter gate that
decides whether content may be sent at all.
"""

import re
import unicodedata

MAX_CONTENT_LENGTH = 2000
TRUNCATION_WINDOW = 100
MAX_TRACKING_NUMBER_LENGTH = 50
MAX_SAFE_WORDS = 500
MAX_SPECIAL_CHAR_RATIO = 0.3

# Phrase patterns match whole words only, so "contact as" and
# "ecosystem admin" are not injection phrases
_INJECTION_PATTERNS = [
    # Instruction overrides
    r"\bignore\s+(?:all\s+)?(?:previous|prior|above)\s+(?:instructions?|prompts?|commands?)\b",
    r"\b(?:forget|disregard)\s+(?:previous|above|earlier|all)\s+(?:instructions?|prompts?|commands?|context)\b",
    r"\bnew\s+(?:instructions?|prompts?|commands?|tasks?)\b\s*:?",
    r"\b(?:system|admin|root|developer)\s+(?:instructions?|prompts?|commands?|override)\b",
    # Role manipulation
    r"\bact\s+as\s+(?:an?\s+)?(?:system\s+)?(?:administrator|admin|root|developer)\b",
    r"\bsystem\s+admin(?:istrator)?\b",
    r"\bpretend\s+to\s+be\b",
    r"\brole\s*play\b",
    r"\byou\s+are\s+now\b",
    # Safety bypass
    r"\b(?:override|bypass|circumvent)\s+(?:security|safety|rules|guidelines)\b",
    r"\bdisable\s+(?:security|safety)\s+(?:guidelines|rules)\b",
    r"\b(?:admin|root)\s+(?:access|privileges)\b",
    r"\bignores?\s+safety\b",
    # Chat-template delimiters
    r"\[INST\].*?\[/INST\]",
    r"<\|.*?\|>",
    r"###\s*(?:System|User|Assistant).*?###",
    # Code payloads
    r"<script[^>]*>.*?</script>",
    r"javascript:",
    r"data:text/html",
    # Runaway repetition
    r"(?:\b(?:hack|test|spam)\b\W*){10,}",
]

_DANGEROUS_PATTERNS = [
    re.compile(pattern, re.IGNORECASE | re.DOTALL) for pattern in _INJECTION_PATTERNS
]

_SYMBOL_RUN = re.compile(r"[^\w\s]{4,}")
_QUOTE_RUN = re.compile(r"[`\"']{3,}")
_WHITESPACE = re.compile(r"\s+")

_FUNCTION_WORDS = (
    r"and|or|the|a|an|as|is|are|was|were|be|been|being|have|has|had|do|does|"
    r"did|will|would|could|should|may|might|can|must|shall"
)
_TRAILING_FUNCTION_WORD = re.compile(rf"\s*\b(?:{_FUNCTION_WORDS})\s*$", re.IGNORECASE)
_LEADING_FUNCTION_WORD = re.compile(rf"^(?:{_FUNCTION_WORDS})\s+", re.IGNORECASE)

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")

# Phrases that fail the safety gate outright
SAFETY_DENYLIST = (
    "ignore all previous",
    "new instructions",
    "system override",
    "developer mode",
    "admin access",
    "root privileges",
    "bypass security",
    "</instructions>",
    "<instructions>",
    "[inst]",
    "[/inst]",
)


class ContentSanitizer:
    """Strips injection payloads from text bound for a model prompt."""

    def __init__(self, max_length: int = MAX_CONTENT_LENGTH):
        self.max_length = max_length

    def sanitize_email_content(self, content: str) -> str:
        """
        Remove injection patterns and normalize email text.

        Control characters go first. Each dangerous match becomes a single
        space and symbol runs are removed. Whitespace is then collapsed and
        dangling function words left by the removals are trimmed. The result
        is bounded to max_length characters, cut at a word boundary when one
        is close.
        """
        if not content:
            return ""

        sanitized = self.normalize_content(content)
        for pattern in _DANGEROUS_PATTERNS:
            sanitized = pattern.sub(" ", sanitized)

        sanitized = _SYMBOL_RUN.sub("", sanitized)
        sanitized = _QUOTE_RUN.sub("", sanitized)
        sanitized = _WHITESPACE.sub(" ", sanitized).strip()

        sanitized = _TRAILING_FUNCTION_WORD.sub("", sanitized)
        sanitized = _LEADING_FUNCTION_WORD.sub("", sanitized)

        if len(sanitized) > self.max_length:
            truncated = sanitized[: self.max_length]
            last_space = truncated.rfind(" ")
            if last_space > self.max_length - TRUNCATION_WINDOW:
                truncated = truncated[:last_space]
            sanitized = truncated + "..."

        return sanitized.strip()

    @staticmethod
    def normalize_content(content: str) -> str:
        """Drop control characters, keep printable text, collapse whitespace."""
        chars: list[str] = []
        for c in content:
            if c in "\t\n\r":
                chars.append(" ")
            elif unicodedata.category(c) == "Cc":
                continue
            elif c.isprintable() or c.isspace():
                chars.append(c)

        return _WHITESPACE.sub(" ", "".join(chars)).strip()

    @staticmethod
    def sanitize_tracking_number(tracking_number: str) -> str:
        """Keep only ASCII letters and digits, at most 50 of them."""
        cleaned = _NON_ALPHANUMERIC.sub("", tracking_number or "")
        return cleaned[:MAX_TRACKING_NUMBER_LENGTH]

    @staticmethod
    def validate_content_safety(content: str) -> bool:
        """
        Decide whether content is safe to put in a prompt.

        Empty content is safe. Content fails when it contains a denylisted
        phrase, runs past 500 words, or is more than 30% special
        characters.
        """
        if not content:
            return True

        lower = content.lower()
        if any(phrase in lower for phrase in SAFETY_DENYLIST):
            return False

        if len(content.split()) > MAX_SAFE_WORDS:
            return False

        special = sum(1 for c in content if not (c.isalnum() or c.isspace()))
        return special / len(content) <= MAX_SPECIAL_CHAR_RATIO
