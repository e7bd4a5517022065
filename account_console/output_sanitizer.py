"""Output sanitization — redact card numbers, tokens and inline photos before returning to the host."""
import re

_CREDENTIAL_PATTERNS = [
    re.compile(r"(?i)(access[_-]?token|api[_-]?key|secret|password)\s*[=:]\s*\S+"),
    re.compile(r"(?i)bearer\s+[A-Za-z0-9._~+/=-]+"),
    re.compile(r"sk_(?:live|test)_[a-zA-Z0-9]{16,}"),   # Stripe secret keys
]

# Full card numbers (13-19 digits, optionally separated). last4 alone never matches.
_CARD_NUMBER_PATTERN = re.compile(r"\b(?:\d{4}[-\s]?){2,4}\d{1,4}\b")

# Inline photos returned by the in-memory gateway
_DATA_URL_PATTERN = re.compile(r"data:(image/[\w.+-]+);base64,([A-Za-z0-9+/=]+)")


def redact_email(email: str) -> str:
    """Partially redact an email address."""
    if "@" not in email:
        return email
    local, domain = email.split("@", 1)
    return f"{local[0]}***@{domain}" if local else f"***@{domain}"


def _shorten_data_url(match: re.Match) -> str:
    return f"data:{match.group(1)};base64,[{len(match.group(2))} chars]"


def sanitize_output(text: str, max_chars: int = 20000) -> str:
    """
    Sanitize text before it leaves the process.

    - Collapses inline base64 photos
    - Redacts tokens and credentials
    - Redacts full card numbers
    - Truncates to max_chars
    """
    text = _DATA_URL_PATTERN.sub(_shorten_data_url, text)

    for pattern in _CREDENTIAL_PATTERNS:
        text = pattern.sub("[REDACTED]", text)

    text = _CARD_NUMBER_PATTERN.sub("[CARD REDACTED]", text)

    if len(text) > max_chars:
        text = text[:max_chars] + f"\n\n[... truncated at {max_chars} chars]"

    return text
