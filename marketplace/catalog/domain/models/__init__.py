from .listing import effective_status, is_past_expiry


__all__ = ["effective_status", "is_past_expiry"]
