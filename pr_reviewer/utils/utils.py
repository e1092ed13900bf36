"""
PR Reviewer Utilities
"""


def mask_secret(secret: str, visible: int = 4) -> str:
    """Keep only the first few characters of a secret (e.g. a GitHub PAT's 'ghp_' prefix) for logging."""
    secret = str(secret)
    if len(secret) <= visible:
        return '*' * len(secret)
    return secret[:visible] + '*' * 8
