import hashlib
import hmac


def hash_credential(raw_credential: str, secret: str) -> str:
    """
    One-way digest of a raw bearer credential.

    HMAC-SHA256 keyed with a server secret: deterministic so the refresh
    digest can be indexed for point lookup, and useless without the key.
    """
    if not raw_credential:
        raise ValueError("Credential is required")
    return hmac.new(
        secret.encode("utf-8"), raw_credential.encode("utf-8"), hashlib.sha256
    ).hexdigest()
