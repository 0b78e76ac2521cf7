import time

import shortuuid

SALE_NUMBER_PREFIX = "SALE"


def generate_short_token(length: int = 12) -> str:
    return shortuuid.ShortUUID().random(length=length)


def generate_sale_number(now_ms: int | None = None) -> str:
    # Millisecond timestamp plus a random suffix; uniqueness is not enforced by the schema.
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{SALE_NUMBER_PREFIX}-{stamp}-{generate_short_token(6)}"
