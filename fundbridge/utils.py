"""Small formatting helpers shared by models and services."""

from decimal import ROUND_HALF_EVEN, Decimal, localcontext


def to_iso(value):
    """ISO-8601 string for a datetime, or None."""
    return value.isoformat() if value is not None else None


def format_number(value):
    """Render a number without a trailing ``.0`` (15.0 -> "15", 12.5 -> "12.5")."""
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return f"{float(value):g}"


def format_inr(amount):
    """Format an amount with Indian digit grouping, up to 3 decimals.

    500000 -> "5,00,000"; 12345678.5 -> "1,23,45,678.5"; 0.01 -> "0.01"
    """
    value = Decimal(str(amount))
    with localcontext() as ctx:
        # Room for every integer digit plus three decimals (floats reach 1e308)
        ctx.prec = max(ctx.prec, value.adjusted() + 5)
        quantized = value.quantize(Decimal("0.001"), rounding=ROUND_HALF_EVEN)
    sign = "-" if quantized < 0 else ""
    text = f"{abs(quantized):f}"
    whole, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")

    # Last three digits, then groups of two
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{whole}.{fraction}" if fraction else f"{sign}{whole}"
