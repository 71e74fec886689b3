"""Remote URL construction and credential masking.

Fork remotes carry the account token in the URL so that clone and push work
over HTTPS without a credential helper. Anything derived from git output can
therefore contain the token and must go through sanitize_credentials()
before it is logged or stored.
"""

import re

DEFAULT_GIT_HOST = "github.com"

REDACTED = "***REDACTED***"


def build_fork_url(owner: str, name: str, token: str, host: str = DEFAULT_GIT_HOST) -> str:
    """Build the authenticated HTTPS URL for a fork.

    Args:
        owner: Repository owner
        name: Repository name
        token: Access token for the account (may be empty)
        host: Git host name

    Returns:
        URL of the form https://<token>@<host>/<owner>/<name>.git
    """
    if token:
        return f"https://{token}@{host}/{owner}/{name}.git"
    return f"https://{host}/{owner}/{name}.git"


def build_upstream_url(owner: str, name: str, host: str = DEFAULT_GIT_HOST) -> str:
    """Build the anonymous HTTPS URL for an upstream repository."""
    return f"https://{host}/{owner}/{name}.git"


def sanitize_credentials(text: str) -> str:
    """Mask credentials embedded in URLs and headers.

    Example:
        >>> sanitize_credentials("fatal: https://ghp_abc123@github.com/o/r.git")
        'fatal: https://***REDACTED***@github.com/o/r.git'
    """
    if not text:
        return text

    # user:password@ before token@ so the password is never half-masked
    sanitized = re.sub(r'://[^/\s:@]+:[^/\s@]+@', r'://***:***@', text)
    sanitized = re.sub(r'://(?!\*\*\*)[^/\s@]+@', f'://{REDACTED}@', sanitized)

    sanitized = re.sub(
        r'Authorization:\s*[^\n\r]+',
        f'Authorization: {REDACTED}',
        sanitized,
        flags=re.IGNORECASE,
    )
    sanitized = re.sub(
        r'Bearer\s+[^\s\n\r]+',
        f'Bearer {REDACTED}',
        sanitized,
        flags=re.IGNORECASE,
    )
    return sanitized
