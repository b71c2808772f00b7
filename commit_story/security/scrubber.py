"""
Secret Scrubbing

Detection and redaction of sensitive data before context leaves the machine.
Matches are replaced by a marker, never dropped, so the sentence around a
secret still reads.
"""

import re

# Pattern tuples: (regex_pattern, replacement_text, flags)
SECRET_PATTERNS: list[tuple[str, str, int]] = [
    # Private keys
    (
        r"-----BEGIN (RSA |DSA |EC |OPENSSH |PGP )?PRIVATE KEY-----",
        "[PRIVATE_KEY_REDACTED]",
        0,
    ),
    # AWS
    (r"\bAKIA[0-9A-Z]{16}\b", "[AWS_ACCESS_KEY_REDACTED]", 0),
    (
        r"aws[_-]?secret[_-]?access[_-]?key\s*[=:]\s*['\"]?[A-Za-z0-9/+=]{40}['\"]?",
        "[AWS_SECRET_REDACTED]",
        re.IGNORECASE,
    ),
    # GitHub / GitLab
    (r"\bghp_[a-zA-Z0-9]{36}\b", "[GITHUB_PAT_REDACTED]", 0),
    (r"\bgho_[a-zA-Z0-9]{36}\b", "[GITHUB_OAUTH_REDACTED]", 0),
    (r"\bghu_[a-zA-Z0-9]{36}\b", "[GITHUB_USER_REDACTED]", 0),
    (r"\bghs_[a-zA-Z0-9]{36}\b", "[GITHUB_SERVER_REDACTED]", 0),
    (r"\bghr_[a-zA-Z0-9]{36}\b", "[GITHUB_REFRESH_REDACTED]", 0),
    (r"\bglpat-[a-zA-Z0-9_\-]{20,}", "[GITLAB_TOKEN_REDACTED]", 0),
    # Stripe
    (r"\bsk_(live|test)_[0-9a-zA-Z]{16,}", "[STRIPE_SECRET_REDACTED]", 0),
    (r"\bpk_(live|test)_[0-9a-zA-Z]{16,}", "[STRIPE_PUBLIC_REDACTED]", 0),
    # Slack
    (r"\bxox[bapors]-[0-9a-zA-Z\-]{10,}", "[SLACK_TOKEN_REDACTED]", 0),
    # Anthropic
    (r"\bsk-ant-[a-zA-Z0-9\-_]{20,}", "[ANTHROPIC_KEY_REDACTED]", 0),
    # OpenAI
    (r"\bsk-(proj-)?[a-zA-Z0-9_\-]{32,}", "[OPENAI_KEY_REDACTED]", 0),
    # Google
    (r"\bAIza[0-9A-Za-z_\-]{35}", "[GOOGLE_KEY_REDACTED]", 0),
    # Other prefixed keys
    (r"\b(sk|pk|rk)-[a-zA-Z0-9_\-]{10,}", "[REDACTED_KEY]", 0),
    # JWTs (base64 header.payload.signature)
    (r"\beyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+", "[REDACTED_JWT]", 0),
    # Auth Bearer tokens
    (r"\bBearer\s+[a-zA-Z0-9\-._~+/]{16,}=*", "Bearer [REDACTED_TOKEN]", 0),
    # Generic API keys/secrets in quoted assignments
    (
        r'["\']?(?:api[_-]?key|secret|password|passwd|token|auth|credential)s?["\']?\s*[:=]\s*["\'](?!\[)[^"\'\n]{8,}["\']',
        "[SECRET_REDACTED]",
        re.IGNORECASE,
    ),
    # Unquoted key-like values next to credential names
    (
        r"\b(api[_-]?key|access[_-]?token|auth[_-]?token|token|secret|password|credential)(\s*[:=]\s*|\s+)[a-zA-Z0-9_\-]{20,}\b",
        r"\1\2[REDACTED_KEY]",
        re.IGNORECASE,
    ),
    # Long base64-like runs mixing upper, lower and digits, with at most five
    # inner '/'. Hex SHAs, absolute paths and paths ending in an extension never match.
    (
        r"(?<![A-Za-z0-9+/=_.-])"
        r"(?=[A-Za-z0-9+/]*[A-Z])(?=[A-Za-z0-9+/]*[a-z])(?=[A-Za-z0-9+/]*[0-9])(?=[A-Za-z0-9+/]{40,})"
        r"[A-Za-z0-9+]{2,}(?:/[A-Za-z0-9+]{2,}){0,5}={0,2}"
        r"(?![A-Za-z0-9+/=_-]|\.[A-Za-z0-9])",
        "[REDACTED_TOKEN]",
        0,
    ),
]

EMAIL_PATTERN = (r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}", "[REDACTED_EMAIL]", 0)

_COMPILED = [(re.compile(pattern, flags), replacement) for pattern, replacement, flags in SECRET_PATTERNS]
_COMPILED_EMAIL = re.compile(EMAIL_PATTERN[0])


def scrub_secrets_with_count(text: str, include_emails: bool = True) -> tuple[str, int]:
    """
    Redact sensitive data and count the replacements.

    Args:
        text: Text that may contain secrets
        include_emails: Also redact e-mail addresses

    Returns:
        (redacted text, number of replacements)
    """
    if not text:
        return text, 0
    total = 0
    for pattern, replacement in _COMPILED:
        text, count = pattern.subn(replacement, text)
        total += count
    if include_emails:
        text, count = _COMPILED_EMAIL.subn(EMAIL_PATTERN[1], text)
        total += count
    return text, total


def scrub_secrets(text: str, include_emails: bool = True) -> str:
    """
    Remove sensitive data from text.

    Applies all patterns in SECRET_PATTERNS to redact sensitive information.

    Args:
        text: Text that may contain secrets
        include_emails: Also redact e-mail addresses

    Returns:
        Text with secrets replaced by redaction markers
    """
    return scrub_secrets_with_count(text, include_emails)[0]
