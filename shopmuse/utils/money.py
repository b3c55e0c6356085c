# shopmuse/utils/money.py
import math
import re
from typing import Optional

def format_inr(amount: float) -> str:
    """
    Indian digit grouping as used on price tags: 24999 -> "24,999", 123456.5 -> "1,23,456.5".
    Up to three decimals are kept; trailing zeros are dropped.
    """
    if not math.isfinite(amount):
        return str(amount)
    sign = "-" if amount < 0 else ""
    whole, _, frac = f"{abs(amount):.3f}".partition(".")
    frac = frac.rstrip("0")

    # last three digits, then groups of two
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    grouped = ",".join(groups + [tail])
    return f"{sign}{grouped}" + (f".{frac}" if frac else "")

def rupees(amount: float) -> str:
    return f"₹{format_inr(amount)}"

def first_number(text: str) -> Optional[int]:
    """First run of digits in `text` (no separators), or None."""
    m = re.search(r"\d+", text or "")
    return int(m.group(0)) if m else None
