from typing import Dict, Iterable


def mask_value(value: str) -> str:
    """Mask an email (keep two leading characters and the domain) or any other secret-ish string."""
    if not isinstance(value, str):
        return value
    if "@" in value:
        name, _, domain = value.partition("@")
        return (name[:2] + "***@" + domain) if name else "***@" + domain
    if len(value) > 12:
        return value[:4] + "..." + value[-4:]
    return "***"


def sanitize_payload(payload: Dict, allowed_keys: Iterable[str], masked_keys: Iterable[str] = ("email",)) -> Dict:
    """Copy only ``allowed_keys`` from payload for logging, masking the ``masked_keys``."""
    masked = set(masked_keys)
    result = {}
    for key in allowed_keys:
        if key in payload:
            result[key] = mask_value(payload[key]) if key in masked else payload[key]
    return result
