import typing

from bitarray import bitarray, frozenbitarray
from bitarray.util import ba2int

from .address import Address, ExternalAddress, VarAddress, Anycast
from .cell import Cell
from .exceptions import CellError, BufferUnderflow, RefUnderflow, UnexpectedData
from .exotic import CellTypes
from .tvm_bitarray import BitarrayLike


class Slice:
    """
    Read cursor over a cell. The cell itself is never changed:
    slice keeps its own copy of bits and moves ref_offset over cell refs.
    """

    def __init__(self, bits: BitarrayLike, refs: typing.Sequence[Cell], type_: int = CellTypes.ordinary):
        self.bits = bitarray(bits)
        self.refs = tuple(refs)
        self.type_ = type_
        self.ref_offset = 0

    @classmethod
    def from_cell(cls, cell: Cell) -> "Slice":
        return cls(cell.bits, cell.refs, cell.type_)

    @classmethod
    def one_from_boc(cls, data: typing.Union[bytes, bytearray, str]) -> "Slice":
        return Cell.one_from_boc(data).begin_parse()

    def is_special(self) -> bool:
        return self.type_ != CellTypes.ordinary

    @property
    def remaining_bits(self) -> int:
        return len(self.bits)

    @property
    def remaining_refs(self) -> int:
        return len(self.refs) - self.ref_offset

    def _check_bits(self, length: int) -> None:
        if length < 0:
            raise CellError(f'can not read {length} bits')
        if length > len(self.bits):
            raise BufferUnderflow(f'not enough bits: requested {length}, {len(self.bits)} left')

    def _check_refs(self, count: int = 1) -> None:
        if count > self.remaining_refs:
            raise RefUnderflow(f'not enough refs: requested {count}, {self.remaining_refs} left')

    def ensure_empty(self) -> None:
        if self.bits or self.remaining_refs:
            raise UnexpectedData(f'slice is not empty: {len(self.bits)} bits and {self.remaining_refs} refs left')

    def to_cell(self) -> Cell:
        return Cell(self.bits, self.refs[self.ref_offset:], self.type_)

    def copy(self) -> "Slice":
        result = Slice(self.bits, self.refs, self.type_)
        result.ref_offset = self.ref_offset
        return result

    def preload_bit(self) -> int:
        self._check_bits(1)
        return self.bits[0]

    def load_bit(self) -> int:
        bit = self.preload_bit()
        del self.bits[0]
        return bit

    def preload_bool(self) -> bool:
        return bool(self.preload_bit())

    def load_bool(self) -> bool:
        return bool(self.load_bit())

    def skip_bits(self, length: int) -> "Slice":
        self._check_bits(length)
        del self.bits[:length]
        return self

    def preload_bits(self, length: int) -> frozenbitarray:
        self._check_bits(length)
        return frozenbitarray(self.bits[:length])

    def load_bits(self, length: int) -> frozenbitarray:
        bits = self.preload_bits(length)
        del self.bits[:length]
        return bits

    def preload_uint(self, length: int) -> int:
        self._check_bits(length)
        if length == 0:
            return 0
        return ba2int(self.bits[:length], signed=False)

    def load_uint(self, length: int) -> int:
        uint = self.preload_uint(length)
        del self.bits[:length]
        return uint

    def preload_int(self, length: int) -> int:
        self._check_bits(length)
        if length == 0:
            return 0
        return ba2int(self.bits[:length], signed=True)

    def load_int(self, length: int) -> int:
        integer = self.preload_int(length)
        del self.bits[:length]
        return integer

    def preload_bytes(self, length: int) -> bytes:
        self._check_bits(length * 8)
        return self.bits[:length * 8].tobytes()

    def load_bytes(self, length: int) -> bytes:
        bytes_ = self.preload_bytes(length)
        del self.bits[:length * 8]
        return bytes_

    def preload_var_uint(self, bit_length: int) -> int:
        return self.copy().load_var_uint(bit_length)

    def load_var_uint(self, bit_length: int) -> int:
        length = self.preload_uint(bit_length)
        self._check_bits(bit_length + length * 8)
        self.skip_bits(bit_length)
        return self.load_uint(length * 8)

    def preload_var_int(self, bit_length: int) -> int:
        return self.copy().load_var_int(bit_length)

    def load_var_int(self, bit_length: int) -> int:
        length = self.preload_uint(bit_length)
        self._check_bits(bit_length + length * 8)
        self.skip_bits(bit_length)
        return self.load_int(length * 8)

    def preload_coins(self) -> int:
        return self.preload_var_uint(4)

    def load_coins(self) -> int:
        return self.load_var_uint(4)

    def preload_string(self, byte_length: int = 0) -> str:
        if byte_length == 0:
            byte_length = len(self.bits) // 8
        return self.preload_bytes(byte_length).decode()

    def load_string(self, byte_length: int = 0) -> str:
        if byte_length == 0:
            byte_length = len(self.bits) // 8
        return self.load_bytes(byte_length).decode()

    def load_snake_bytes(self) -> bytes:
        """
        Reads all whole bytes of this slice and then follows the first ref of every next cell
        """
        result = self.load_bytes(len(self.bits) // 8)
        cs = self
        while cs.remaining_refs:
            cs = cs.load_ref().begin_parse()
            result += cs.load_bytes(len(cs.bits) // 8)
        return result

    def load_snake_string(self) -> str:
        return self.load_snake_bytes().decode()

    def load_anycast(self) -> typing.Optional[Anycast]:
        if not self.load_bit():
            return None
        depth = self.load_uint(5)
        return Anycast(depth, self.load_bits(depth))

    def preload_address(self) -> typing.Union[None, Address, ExternalAddress, VarAddress]:
        return self.copy().load_address()

    def load_address(self) -> typing.Union[None, Address, ExternalAddress, VarAddress]:
        tag = self.load_uint(2)
        if tag == 0:  # addr_none$00
            return None
        if tag == 1:  # addr_extern$01
            length = self.load_uint(9)
            return ExternalAddress(self.load_bits(length), length)
        anycast = self.load_anycast()
        if tag == 2:  # addr_std$10
            wc = self.load_int(8)
            return Address((wc, self.load_bytes(32)), anycast)
        # addr_var$11
        length = self.load_uint(9)
        wc = self.load_int(32)
        return VarAddress(wc, self.load_bits(length), anycast)

    def preload_ref(self) -> Cell:
        self._check_refs()
        return self.refs[self.ref_offset]

    def load_ref(self) -> Cell:
        ref = self.preload_ref()
        self.ref_offset += 1
        return ref

    def preload_maybe_ref(self) -> typing.Optional[Cell]:
        if self.preload_bit():
            return self.preload_ref()
        return None

    def load_maybe_ref(self) -> typing.Optional[Cell]:
        if self.preload_bit():
            self._check_refs()
            self.skip_bits(1)
            return self.load_ref()
        self.skip_bits(1)
        return None

    def load_hashmap(self, key_length: int, key_deserializer: typing.Optional[typing.Callable] = None,
                     value_deserializer: typing.Optional[typing.Callable] = None) -> dict:
        """
        Hashmap stored right in this slice. Consumes the root label and the root refs,
        the rest of the slice is left untouched
        """
        from .dict import HashMap
        return HashMap.parse(self, key_length, key_deserializer, value_deserializer)

    def preload_dict(self, key_length: int, key_deserializer: typing.Optional[typing.Callable] = None,
                     value_deserializer: typing.Optional[typing.Callable] = None) -> typing.Optional[dict]:
        from .dict import HashMap
        root = self.preload_maybe_ref()
        if root is None:
            return None
        return HashMap.parse(root.begin_parse(), key_length, key_deserializer, value_deserializer)

    def load_dict(self, key_length: int, key_deserializer: typing.Optional[typing.Callable] = None,
                  value_deserializer: typing.Optional[typing.Callable] = None) -> typing.Optional[dict]:
        """
        HashmapE: returns None for empty dict
        """
        from .dict import HashMap
        root = self.load_maybe_ref()
        if root is None:
            return None
        return HashMap.parse(root.begin_parse(), key_length, key_deserializer, value_deserializer)

    def load_tlb(self, scheme):
        return scheme.deserialize(self)

    def __repr__(self) -> str:
        return f'<Slice {len(self.bits)}[{self.bits.tobytes().hex().upper()}] -> {self.remaining_refs} refs>'

    def __str__(self) -> str:
        return self.to_cell().dump()
