from .parse import DictError, CorruptDict
from .dict import HashMap, uint_key, int_key, bytes_key, address_key
