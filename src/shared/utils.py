def mask_key(key: str) -> str:
    """Mask an API key for logging, keeping only its edges."""
    if not key:
        return "<none>"
    if len(key) <= 8:
        return "****"
    return f"{key[:4]}...{key[-4:]}"
