"""
Utility functions for the application.
"""
from typing import Any, Dict, List
from decimal import Decimal, ROUND_DOWN

CENT = Decimal("0.01")


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"error": message}
    if details:
        response["details"] = details
    return response


def username_from_email(email: str) -> str:
    """Default username: the local part of the email address."""
    return email.split("@", 1)[0].strip().lower()


def split_evenly(total: Decimal, count: int) -> List[Decimal]:
    """
    Split total into count cent-exact shares.
    Leftover cents go to the first shares so the parts always sum to total.
    """
    if count <= 0:
        raise ValueError("count must be positive")
    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    remainder = int((total - base * count) / CENT)
    return [base + CENT if i < remainder else base for i in range(count)]
