import time


def generate_query_id(offset: int = 7200) -> int:
    """
    Highload wallet query id: expiration timestamp in the high 32 bits
    """
    return int(time.time() + offset) << 32


def generate_valid_until(timeout: int = 60) -> int:
    return int(time.time()) + timeout
