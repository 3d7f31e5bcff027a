"""Helpers for identifying and masking secret values.

Credential inputs whose names look secret are hidden while typing and masked
whenever they are echoed back to the terminal.
"""

# Substrings that mark a credential name as secret
SECRET_MARKERS = ("key", "secret", "password", "token")


def is_secret_name(name: str) -> bool:
    """Check if a credential or setting name should be treated as secret.

    Examples:
        >>> is_secret_name("api_key")
        True
        >>> is_secret_name("SLACK_TOKEN")
        True
        >>> is_secret_name("spreadsheet_id")
        False
    """
    name_lower = name.lower()
    return any(marker in name_lower for marker in SECRET_MARKERS)


def mask_value(value: str) -> str:
    """Mask a value for display (show first 3 chars + ***)."""
    if len(value) <= 3:
        return "***"
    return value[:3] + "***"


def mask_if_secret(name: str, value: str) -> str:
    """Return the value masked when its name is secret, unchanged otherwise."""
    if value and is_secret_name(name):
        return mask_value(value)
    return value
