"""
Utility helpers for the health-intake assistant

Simple utility functions for ID generation.
"""

import time
import uuid

_BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number):
    """
    Encode a non-negative integer in base 36

    Examples:
        >>> to_base36(0)
        '0'
        >>> to_base36(1295)
        'zz'
    """
    if number < 0:
        raise ValueError("to_base36 requires a non-negative integer")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def time_token():
    """Current time in milliseconds, base 36"""
    return to_base36(int(time.time() * 1000))


def random_token(length=8):
    """
    Random lowercase hex string

    Args:
        length (int): Number of characters (max 32)
    """
    return uuid.uuid4().hex[:length]


def generate_conversation_id():
    """
    Generate unique conversation identifier

    Format: conv-{time_base36}-{6 random hex chars}

    Examples:
        >>> generate_conversation_id()
        'conv-m3x9k2p1-a3f7e2'
    """
    return f"conv-{time_token()}-{random_token(6)}"


def generate_message_id():
    """
    Generate unique message identifier

    Format: msg-{time_base36}-{8 random hex chars}
    """
    return f"msg-{time_token()}-{random_token(8)}"
