"""Shared utility helpers."""

import argparse


def positive_int(value: str) -> int:
    """argparse type validator: integer >= 1."""
    ivalue = int(value)
    if ivalue < 1:
        raise argparse.ArgumentTypeError(f"value must be >= 1, got {value}")
    return ivalue


def format_size(size: int) -> str:
    """Return *size* bytes as a short human-readable string."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.2f} GB"
