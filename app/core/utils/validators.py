import re

SEAT_CODE_RE = re.compile(r"^[A-Z][1-9][0-9]?$")
PHONE_RE = re.compile(r"^(\+?\d{1,3}[-.\s]?)?\d{10}$")


def strip_text(v: str | None) -> str | None:
    if v is None:
        return None
    if not isinstance(v, str):
        return v
    v = v.strip()
    return v or None


def check_seat_code(v: str) -> str:
    if not isinstance(v, str) or not SEAT_CODE_RE.match(v):
        raise ValueError("Invalid seat code")
    return v


def check_phone(v: str) -> str:
    if not PHONE_RE.match(v):
        raise ValueError("Invalid phone number format. Use 10 digits or +[country code][10 digits]")
    return v


def split_seat_codes(raw: str) -> list[str]:
    codes = [c.strip() for c in raw.split(",") if c.strip()]
    if not codes:
        raise ValueError("At least one seat id is required")
    bad = [c for c in codes if not SEAT_CODE_RE.match(c)]
    if bad:
        raise ValueError(f"Invalid seat id format: {', '.join(bad)}")
    return list(dict.fromkeys(codes))
