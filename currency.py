# currency.py
CURRENCY_SYMBOLS = {
    "NGN": "₦",
    "GHS": "₵",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "ZAR": "R",
    "KES": "KSh",
    "XOF": "CFA",
    "XAF": "CFA",
    "ZMW": "ZK",
    "BWP": "P",
    "MZN": "MT",
    "TZS": "TSh",
    "UGX": "USh",
    "RWF": "RF",
}

CONTACT_SALES_TEXT = "Contact sales"


def get_currency_symbol(currency_code: str) -> str:
    return CURRENCY_SYMBOLS.get(currency_code, currency_code)


def format_currency(amount: float, currency_code: str) -> str:
    """
    Display formatting only: rounds to 2 decimals, e.g. "$1,150.00" or "₵150.00".
    Unknown codes are prefixed with the code itself ("CHF 12.00").
    """
    symbol = CURRENCY_SYMBOLS.get(currency_code) or f"{currency_code} "
    return f"{symbol}{float(amount):,.2f}"


def format_breakdown_line(line, currency_code: str) -> str:
    if line.is_custom:
        return f"{line.tier}: {line.locations} × {CONTACT_SALES_TEXT}"
    return (
        f"{line.tier}: {line.locations} × {format_currency(line.price_per_location, currency_code)}"
        f" = {format_currency(line.subtotal, currency_code)}"
    )
