import hmac

from quizgate.utils.hash import sha256_hex


def verify_password(submitted: str, stored_hash: str) -> bool:
    """
    Compare the SHA-256 hex digest of `submitted` against the vault hash.

    Unsalted single-round SHA-256 is weak against offline guessing if the
    hash leaks; it is kept because the vault stores digests in this form.

    An empty submission is always rejected, even when the vault holds the
    digest of the empty string.
    """
    if not submitted or not stored_hash:
        return False
    try:
        digest = sha256_hex(submitted)
    except UnicodeEncodeError:
        # lone surrogates cannot match any stored password
        return False
    return hmac.compare_digest(digest.encode("ascii"), stored_hash.encode("utf-8"))
