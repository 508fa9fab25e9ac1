"""
Score Rounding

Percentages and 0-100 scores across the engine round half up, so 12.5
reports as 13 rather than Python's banker's 12.
"""


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative percentages."""
    return int(value + 0.5)
