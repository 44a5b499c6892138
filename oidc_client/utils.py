"""Helpers shared by the OIDC client stores"""

STORAGE_KEY_PREFIX = "oidc"


def get_storage_key(client_id: str) -> str:
    """Namespace storage keys per client so several clients can share one storage"""
    return f"{STORAGE_KEY_PREFIX}:{client_id}"
