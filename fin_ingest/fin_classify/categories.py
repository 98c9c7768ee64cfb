"""Keyword-based category auto-tagging.

Tables are checked in a fixed order and the first table with a matching keyword
wins. Overlaps are expected (``"market"`` is both a grocery word and part of many
other merchant names); the order, not semantic correctness, defines the result.
"""

from __future__ import annotations

import math

INCOME = "Income"
TRANSFER = "Transfer"
OTHER = "Other"

INCOME_KEYWORDS: tuple[str, ...] = (
    "payroll",
    "direct dep",
    "salary",
    "employer",
    "wage",
)

PEER_TRANSFER_KEYWORDS: tuple[str, ...] = (
    "transfer",
    "zelle",
    "venmo",
    "cash app",
    "paypal",
)

_RESTAURANT_KEYWORDS = (
    "mcdonald", "burger", "wendy", "taco bell", "chipotle", "subway", "starbucks",
    "dunkin", "coffee", "pizza", "domino", "papa john", "grubhub", "doordash",
    "uber eat", "postmates", "restaurant", "cafe", "diner", "grill", "kitchen",
    "bakery", "chick-fil", "popeye", "kfc", "arby", "sonic", "panera", "noodle",
    "sushi", "panda express", "five guys", "in-n-out", "whataburger",
    "jack in the box", "del taco", "wingstop", "buffalo wild", "ihop", "denny",
    "waffle", "cracker barrel", "applebee", "chili", "olive garden", "red lobster",
    "outback", "texas roadhouse", "longhorn", "cheesecake factory", "pf chang",
)

_GROCERY_KEYWORDS = (
    "walmart", "target", "kroger", "safeway", "publix", "whole foods", "trader joe",
    "aldi", "costco", "sam's club", "grocery", "market", "food lion", "giant",
    "wegmans", "heb", "meijer", "sprouts", "fresh", "albertson", "vons", "ralph",
    "food",
)

_SHOPPING_KEYWORDS = (
    "amazon", "ebay", "etsy", "best buy", "apple store", "microsoft", "nike",
    "adidas", "foot locker", "nordstrom", "macy", "jcpenney", "kohl", "ross",
    "tj maxx", "marshalls", "burlington", "old navy", "gap", "h&m", "zara",
    "forever 21", "urban outfitters", "home depot", "lowe", "ikea", "bed bath",
    "pottery barn", "williams sonoma", "crate", "dollar", "five below", "big lots",
    "walgreens", "cvs", "rite aid", "ulta", "sephora", "bath & body", "victoria",
    "shop", "store", "mall", "outlet",
)

_TRANSPORTATION_KEYWORDS = (
    "uber", "lyft", "taxi", "gas", "shell", "exxon", "chevron", "bp", "mobil",
    "sunoco", "speedway", "wawa", "sheetz", "quiktrip", "racetrac", "circle k",
    "7-eleven", "fuel", "petro", "parking", "toll", "metro", "transit", "bus",
    "train", "amtrak", "greyhound", "autozone", "advance auto", "o'reilly",
    "jiffy lube", "valvoline", "car wash", "tire", "mechanic", "auto",
)

_ENTERTAINMENT_KEYWORDS = (
    "netflix", "hulu", "disney", "hbo", "spotify", "apple music", "youtube",
    "amazon prime", "paramount", "peacock", "amc", "regal", "cinema", "movie",
    "theater", "concert", "ticketmaster", "stubhub", "live nation", "playstation",
    "xbox", "nintendo", "steam", "game", "twitch", "arcade", "bowling", "golf",
    "gym", "fitness", "planet fitness", "24 hour", "anytime", "equinox",
    "orangetheory", "crossfit", "yoga", "spa", "massage", "salon", "barber", "nail",
)

_BILLS_KEYWORDS = (
    "electric", "power", "energy", "water", "sewer", "gas bill", "utility",
    "internet", "comcast", "xfinity", "spectrum", "at&t", "verizon", "t-mobile",
    "sprint", "phone", "wireless", "mobile", "cable", "directv", "dish",
    "insurance", "geico", "progressive", "state farm", "allstate", "liberty mutual",
    "rent", "lease", "mortgage", "hoa", "property", "apartment", "landlord",
)

_HEALTH_KEYWORDS = (
    "pharmacy", "drug", "rx", "medical", "doctor", "hospital", "clinic",
    "urgent care", "dental", "dentist", "orthodont", "vision", "optom", "eye",
    "glasses", "contacts", "therapy", "counseling", "mental health", "lab",
    "diagnostic", "imaging", "xray", "mri",
)

_TRAVEL_KEYWORDS = (
    "airline", "delta", "united", "american air", "southwest", "jetblue",
    "frontier", "spirit", "alaska air", "flight", "airport", "tsa", "hotel",
    "marriott", "hilton", "hyatt", "ihg", "wyndham", "best western", "motel",
    "airbnb", "vrbo", "booking.com", "expedia", "kayak", "priceline",
    "tripadvisor", "hertz", "enterprise", "avis", "budget", "national car",
    "rental car", "cruise", "carnival", "royal caribbean",
)

_TRANSFER_KEYWORDS = (
    "transfer", "zelle", "venmo", "cash app", "paypal", "wire", "ach",
    "withdrawal", "atm",
)

# Restaurants are checked before groceries; both roll up to Food & Drink.
EXPENSE_CATEGORY_TABLES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Food & Drink", _RESTAURANT_KEYWORDS),
    ("Food & Drink", _GROCERY_KEYWORDS),
    ("Shopping", _SHOPPING_KEYWORDS),
    ("Transportation", _TRANSPORTATION_KEYWORDS),
    ("Entertainment", _ENTERTAINMENT_KEYWORDS),
    ("Bills & Utilities", _BILLS_KEYWORDS),
    ("Health", _HEALTH_KEYWORDS),
    ("Travel", _TRAVEL_KEYWORDS),
    (TRANSFER, _TRANSFER_KEYWORDS),
)

CATEGORY_LABELS: frozenset[str] = frozenset(
    {INCOME, TRANSFER, OTHER, *(label for label, _ in EXPENSE_CATEGORY_TABLES)}
)


def auto_tag(
    category: str | None,
    merchant_name: str | None,
    name: str | None,
    amount: float,
) -> str:
    """Return a category label for a transaction; always one of ``CATEGORY_LABELS``.

    ``category`` is accepted for signature parity with the spend classifier but a
    source-supplied category is preferred by callers before auto-tagging runs.
    """

    text = str(merchant_name or name or "").lower()

    if coerce_amount(amount) > 0:
        if _contains_any(text, INCOME_KEYWORDS):
            return INCOME
        if _contains_any(text, PEER_TRANSFER_KEYWORDS):
            return TRANSFER
        return INCOME

    for label, keywords in EXPENSE_CATEGORY_TABLES:
        if _contains_any(text, keywords):
            return label
    return OTHER


def coerce_amount(amount: object) -> float:
    """Return ``amount`` as a float, treating missing or non-numeric values as zero."""

    try:
        value = float(amount)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(value) else value


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)
