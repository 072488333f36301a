"""fr-FR display formatting for amounts and quantities."""
from decimal import ROUND_HALF_UP, Decimal

from agency_pricing.config import get_settings


def _group_thousands(integer_part: str) -> str:
    digits = integer_part.lstrip("-")
    sign = "-" if integer_part.startswith("-") else ""
    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return sign + " ".join(groups)


def format_number(value: Decimal, max_decimals: int = 2) -> str:
    """1234567.5 -> '1 234 567,5'. Trailing zeros are dropped."""
    quantum = Decimal(10) ** -max_decimals
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{rounded:f}"
    if "." in text:
        integer_part, fraction = text.split(".")
        fraction = fraction.rstrip("0")
    else:
        integer_part, fraction = text, ""
    grouped = _group_thousands(integer_part)
    return f"{grouped},{fraction}" if fraction else grouped


def format_currency(value: Decimal, label: str | None = None) -> str:
    """Whole-unit amount with the configured currency label, e.g. '5 880 000 FCFA'."""
    label = label if label is not None else get_settings().currency_label
    return f"{format_number(value, max_decimals=0)} {label}".strip()


def format_days(days: Decimal) -> str:
    # French singular below 2 ("1,5 jour")
    noun = "jour" if days < 2 else "jours"
    return f"{format_number(days)} {noun}"


def format_hours(hours: Decimal) -> str:
    noun = "heure" if hours < 2 else "heures"
    return f"{format_number(hours)} {noun}"
