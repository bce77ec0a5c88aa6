import hashlib
import typing

from bitarray import frozenbitarray
from bitarray.util import int2ba, ba2int

from ..address import Address
from ..builder import Builder
from ..cell import Cell
from ..slice import Slice

from .parse import DictError, parse_hashmap
from .utils import serialize_dict

Key = typing.Union[int, str, bytes, Address]


def uint_key(bits: frozenbitarray) -> int:
    return ba2int(bits, signed=False)


def int_key(bits: frozenbitarray) -> int:
    return ba2int(bits, signed=True)


def bytes_key(bits: frozenbitarray) -> bytes:
    return bits.tobytes()


def address_key(bits: frozenbitarray) -> Address:
    return Builder().store_bits(bits).end_cell().begin_parse().load_address()


class HashMap:
    """
    Dictionary with fixed size keys. Keys are kept as unsigned ints (two's complement for signed keys).
    Usage examples:
        dict = HashMap(256, value_serializer=lambda src, dest: dest.store_string(src))
        dict.set('name', 'toncore', hash_key=True).set('description', 'cells and wallets', hash_key=True)

        dict = HashMap(267).with_coins_values()
        dict.set(key=Address('EQBvW8Z5huBkMJYdnfAEM5JqTNkuWX3diqYENkWsIL0XggGG'), value=15)
    """

    def __init__(self, key_size: int,
                 value_serializer: typing.Optional[typing.Callable] = None,
                 map_: typing.Optional[dict] = None,
                 signed_keys: bool = False,
                 ):
        self.size = key_size
        self.signed_keys = signed_keys
        self.value_serializer: typing.Optional[typing.Callable] = value_serializer
        self.map: typing.Dict[int, typing.Any] = {}
        if map_:
            for key, value in map_.items():
                self.set(key, value)

    def set_int_key(self, int_key: int, value) -> "HashMap":
        if self.signed_keys:
            if not -(1 << (self.size - 1)) <= int_key < (1 << (self.size - 1)):
                raise DictError(f'key {int_key} does not fit into int{self.size}')
            int_key &= (1 << self.size) - 1
        elif not 0 <= int_key < (1 << self.size):
            raise DictError(f'key {int_key} does not fit into uint{self.size}')
        self.map[int_key] = value
        return self

    def set(self, key: Key, value, hash_key: bool = False) -> "HashMap":
        """
        :param key: dict key
        :param value: dict value
        :param hash_key: sha256 hash key. Usually used for tokens onchain metadata.
        :return: self
        """
        if hash_key:
            if isinstance(key, str):
                key = key.encode()
            key = hashlib.sha256(key).digest()
        if isinstance(key, (bytes, bytearray)):
            if len(key) * 8 > self.size:
                raise DictError(f'{len(key)} bytes key does not fit into {self.size} bits')
            key = int.from_bytes(key, 'big', signed=False)
        elif isinstance(key, str):
            key = int.from_bytes(key.encode(), 'big', signed=False)
        elif isinstance(key, Address):
            if self.size != 267:
                raise DictError(f'address keys must be 267 bits, dict has {self.size} bits keys')
            key = Builder().store_address(key).end_cell().begin_parse().load_uint(267)
        if isinstance(key, bool) or not isinstance(key, int):
            raise DictError(f'unknown key type {type(key).__name__}')
        return self.set_int_key(key, value)

    def get(self, key: int, default=None):
        if self.signed_keys:
            key &= (1 << self.size) - 1
        return self.map.get(key, default)

    def with_address_values(self) -> "HashMap":
        self.value_serializer = lambda src, dest: dest.store_address(src)
        return self

    def with_uint_values(self, length: int) -> "HashMap":
        self.value_serializer = lambda src, dest: dest.store_uint(src, length)
        return self

    def with_int_values(self, length: int) -> "HashMap":
        self.value_serializer = lambda src, dest: dest.store_int(src, length)
        return self

    def with_coins_values(self) -> "HashMap":
        self.value_serializer = lambda src, dest: dest.store_coins(src)
        return self

    @staticmethod
    def _default_serializer(src, dest: Builder) -> None:
        if isinstance(src, Slice):
            dest.store_slice(src)
        elif isinstance(src, Builder):
            dest.store_cell(src.end_cell())
        else:
            dest.store_cell(src)

    def serialize(self) -> typing.Optional[Cell]:
        """
        :return: Hashmap root cell or None for empty dict
        """
        if not self.map:
            return None
        serializer = self.value_serializer or self._default_serializer
        src = {frozenbitarray(int2ba(k, self.size, signed=False)): v for k, v in self.map.items()}
        return serialize_dict(src, self.size, serializer)

    @classmethod
    def from_cell(cls, dict_cell: Cell, key_length: int, signed_keys: bool = False) -> "HashMap":
        """
        Hashmap root cell -> HashMap with leaf slices as values
        """
        result = cls(key_length, signed_keys=signed_keys)
        for key, value in parse_hashmap(dict_cell.begin_parse(), key_length).items():
            result.map[uint_key(key)] = value
        return result

    @staticmethod
    def parse(dict_slice: Slice,
              key_length: int,  # bits len of key
              key_deserializer: typing.Optional[typing.Callable] = None,  # key bits -> key
              value_deserializer: typing.Optional[typing.Callable] = None  # leaf slice -> value
              ) -> dict:
        if not key_deserializer:
            key_deserializer = uint_key
        dict_result = parse_hashmap(dict_slice, key_length)
        if value_deserializer:
            return {key_deserializer(k): value_deserializer(v) for k, v in dict_result.items()}
        # leaf slices are returned as is
        return {key_deserializer(k): v for k, v in dict_result.items()}

    def __len__(self) -> int:
        return len(self.map)

    def __repr__(self) -> str:
        return f'<HashMap {self.size} bits keys, {len(self.map)} items>'
