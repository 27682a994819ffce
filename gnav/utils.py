
import math
import numbers


def nice_bp_count(bases, use_minus = False):
    """Format a base count for display, e.g. 12 bp, 15 kb, 1.2 Mb."""
    rounded = math.floor(bases) if bases >= 1000 else round(bases)
    if rounded >= 750000:
        return f"{rounded / 1000000:.1f} Mb"
    elif rounded >= 10000:
        return f"{math.ceil(rounded / 1000)} kb"
    elif rounded > 0:
        return f"{rounded} bp"
    elif use_minus:
        return "<1 bp"
    else:
        return "0 bp"


def is_finite_number(value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)
