from datetime import date, time
from typing import Any


def normalize(value: Any) -> Any:
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set)):
        return [normalize(v) for v in value]
    if hasattr(value, "quantize"):
        return str(value)
    return str(value) if not isinstance(value, (str, int, float, bool, type(None))) else value


def normalize_ctx(ctx: dict[str, Any]) -> dict[str, Any]:
    return {k: normalize(v) for k, v in ctx.items()}
