"""
Human-scaled byte formatting
"""

UNITS = ["B", "KB", "MB", "GB"]


def format_bytes(n):
    """Format a byte count using a 1024 base.

    Values larger than the last unit stay in GB, so ``1024**4`` renders as
    ``1024.00 GB``.
    """
    exp = 0
    while n >= 1024 and exp < len(UNITS) - 1:
        n /= 1024
        exp += 1
    return f"{n:.2f} {UNITS[exp]}"
