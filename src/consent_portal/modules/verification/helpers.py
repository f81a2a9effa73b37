"""
Verification Shared Helpers

Email handling shared by the verification and submission modules.
"""


def normalize_email(email: str) -> str:
    """Trim surrounding whitespace and lower-case an email address."""
    return email.strip().lower()


def is_institutional_email(email: str, domain: str) -> bool:
    """
    Check that an email belongs to the institutional domain.

    The local part must be non-empty and the address must end with
    ``@<domain>`` exactly (sub-domains are not accepted).

    Args:
        email: Normalized email address
        domain: Institutional domain, e.g. "iitk.ac.in"

    Returns:
        True if the address is on the institutional domain
    """
    suffix = f"@{domain.lower()}"
    return email.endswith(suffix) and len(email) > len(suffix) and email.count("@") == 1
