import typing

from bitarray import bitarray
from bitarray.util import int2ba

from .address import Address, ExternalAddress, VarAddress, Anycast
from .cell import Cell, MAX_REFS
from .exceptions import CellError, CapacityExceeded, TooManyReferences
from .exotic import CellTypes
from .tvm_bitarray import TvmBitarray, BitarrayLike, MAX_BITS


class Builder:

    def __init__(self, size: int = MAX_BITS, type_: int = CellTypes.ordinary):
        self._size = size
        self._bits = TvmBitarray(size)
        self._refs: typing.List[Cell] = []
        self._type = type_

    @property
    def bits(self) -> TvmBitarray:
        return self._bits

    @property
    def refs(self) -> typing.List[Cell]:
        return self._refs

    @property
    def size(self) -> int:
        return self._size

    @property
    def remaining_bits(self) -> int:
        return self._bits.remaining

    @property
    def remaining_refs(self) -> int:
        return MAX_REFS - len(self._refs)

    def _check_room(self, bits: int = 0, refs: int = 0) -> None:
        if bits > self.remaining_bits:
            raise CapacityExceeded(f'builder overflow: can not store {bits} bits, {self.remaining_bits} left')
        if refs > self.remaining_refs:
            raise TooManyReferences(f'builder overflow: can not store {refs} refs, {self.remaining_refs} left')

    def to_bytes(self) -> bytes:
        return self._bits.tobytes()

    def store_cell(self, cell: Cell) -> "Builder":
        self._check_room(len(cell.bits), len(cell.refs))
        self._bits.extend(cell.bits)
        self._refs.extend(cell.refs)
        return self

    def store_slice(self, cell_slice: "Slice") -> "Builder":
        bits = cell_slice.bits
        refs = cell_slice.refs[cell_slice.ref_offset:]
        self._check_room(len(bits), len(refs))
        self._bits.extend(bits)
        self._refs.extend(refs)
        return self

    def store_ref(self, ref: Cell) -> "Builder":
        if not isinstance(ref, Cell):
            raise CellError(f'expected Cell as ref, got {type(ref).__name__}')
        self._check_room(refs=1)
        self._refs.append(ref)
        return self

    def store_maybe_ref(self, ref: typing.Optional[Cell]) -> "Builder":
        if ref is None:
            return self.store_bit(0)
        self._check_room(1, 1)
        return self.store_bit(1).store_ref(ref)

    def store_bit(self, bit: typing.Union[int, bool, str]) -> "Builder":
        if isinstance(bit, str):
            bit = int(bit)
        self._bits.append(1 if bit else 0)
        return self

    def store_bool(self, value: bool) -> "Builder":
        return self.store_bit(value)

    def store_bits(self, bits: typing.Union[str, typing.Iterable[int], BitarrayLike]) -> "Builder":
        if not isinstance(bits, (str, bitarray)):
            bits = list(bits)
        self._bits.extend(bits)
        return self

    def store_uint(self, value: int, size: int) -> "Builder":
        if size < 0 or value < 0 or value.bit_length() > size:
            raise CellError(f'{value} does not fit into uint{size}')
        if size == 0:
            return self
        self._bits.extend(int2ba(value, size, signed=False))
        return self

    def store_int(self, value: int, size: int) -> "Builder":
        if size == 0:
            if value != 0:
                raise CellError(f'{value} does not fit into int0')
            return self
        if size < 0 or not -(1 << (size - 1)) <= value < (1 << (size - 1)):
            raise CellError(f'{value} does not fit into int{size}')
        self._bits.extend(int2ba(value, size, signed=True))
        return self

    def store_var_uint(self, value: int, bit_length: int) -> "Builder":
        """
        VarUInteger with length prefix of bit_length bits, e.g. 4 for Grams (VarUInteger 16)
        """
        if value < 0:
            raise CellError(f'{value} is negative, VarUInteger expected')
        byte_length = (value.bit_length() + 7) // 8
        if byte_length >= 1 << bit_length:
            raise CellError(f'{value} does not fit into VarUInteger with {bit_length} bits length')
        self._check_room(bit_length + byte_length * 8)
        return self.store_uint(byte_length, bit_length).store_uint(value, byte_length * 8)

    def store_var_int(self, value: int, bit_length: int) -> "Builder":
        magnitude = value if value >= 0 else ~value
        byte_length = (magnitude.bit_length() + 1 + 7) // 8 if value else 0
        if byte_length >= 1 << bit_length:
            raise CellError(f'{value} does not fit into VarInteger with {bit_length} bits length')
        self._check_room(bit_length + byte_length * 8)
        return self.store_uint(byte_length, bit_length).store_int(value, byte_length * 8)

    def store_coins(self, amount: int) -> "Builder":
        return self.store_var_uint(amount, 4)

    def store_bytes(self, value: typing.Union[bytes, bytearray]) -> "Builder":
        self._bits.frombytes(bytes(value))
        return self

    def store_string(self, value: str) -> "Builder":
        return self.store_bytes(value.encode())

    def store_snake_bytes(self, value: typing.Union[bytes, bytearray]) -> "Builder":
        """
        Stores as many bytes as fit into this builder, the rest goes to a chain of refs (127 bytes per cell)
        """
        value = bytes(value)
        head_len = min(len(value), self.remaining_bits // 8)
        head, tail = value[:head_len], value[head_len:]
        if tail:
            self._check_room(refs=1)

        child = None
        for i in reversed(range(0, len(tail), 127)):
            builder = Builder().store_bytes(tail[i: i + 127])
            if child is not None:
                builder.store_ref(child)
            child = builder.end_cell()

        self.store_bytes(head)
        if child is not None:
            self.store_ref(child)
        return self

    def store_snake_string(self, value: str) -> "Builder":
        return self.store_snake_bytes(value.encode())

    def store_anycast(self, anycast: typing.Optional[Anycast]) -> "Builder":
        if anycast is None:
            return self.store_bit(0)
        self._check_room(1 + 5 + anycast.depth)
        return self.store_bit(1).store_uint(anycast.depth, 5).store_bits(anycast.rewrite_pfx)

    def store_address(self, address: typing.Union[None, str, Address, ExternalAddress, VarAddress]) -> "Builder":
        if address is None:
            return self.store_bits('00')  # addr_none$00
        if isinstance(address, str):
            address = Address(address)

        if isinstance(address, ExternalAddress):
            # addr_extern$01 len:(## 9) external_address:(bits len)
            self._check_room(2 + 9 + address.len)
            return self.store_bits('01').store_uint(address.len, 9).store_bits(address.external_address)

        anycast = address.anycast
        anycast_len = 0 if anycast is None else 5 + anycast.depth

        if isinstance(address, VarAddress) or not -128 <= address.wc < 128:
            # addr_var$11 anycast:(Maybe Anycast) addr_len:(## 9) workchain_id:int32 address:(bits addr_len)
            addr_bits = address.address_bits
            self._check_room(2 + 1 + anycast_len + 9 + 32 + len(addr_bits))
            return self.store_bits('11') \
                .store_anycast(anycast) \
                .store_uint(len(addr_bits), 9) \
                .store_int(address.wc, 32) \
                .store_bits(addr_bits)

        # addr_std$10 anycast:(Maybe Anycast) workchain_id:int8 address:bits256
        self._check_room(2 + 1 + anycast_len + 8 + 256)
        return self.store_bits('10') \
            .store_anycast(anycast) \
            .store_int(address.wc, 8) \
            .store_bytes(address.hash_part)

    def store_dict(self, dict_=None, key_size: typing.Optional[int] = None,
                   value_serializer: typing.Optional[typing.Callable] = None) -> "Builder":
        """
        HashmapE: 0 bit for empty dict, otherwise 1 bit and ref to the root.
        :param dict_: root Cell, HashMap or dict (key_size required)
        """
        return self.store_maybe_ref(self._dict_root(dict_, key_size, value_serializer))

    def store_hashmap(self, dict_, key_size: typing.Optional[int] = None,
                      value_serializer: typing.Optional[typing.Callable] = None) -> "Builder":
        """
        Hashmap stored inline, without the Maybe bit and ref. Empty dicts can not be stored this way.
        """
        from .dict import DictError
        root = self._dict_root(dict_, key_size, value_serializer)
        if root is None:
            raise DictError('empty dict can not be stored as Hashmap')
        return self.store_cell(root)

    @staticmethod
    def _dict_root(dict_, key_size, value_serializer) -> typing.Optional[Cell]:
        from .dict import HashMap
        if dict_ is None or isinstance(dict_, Cell):
            return dict_
        if isinstance(dict_, dict):
            if key_size is None:
                raise CellError('key_size is required to store a dict')
            dict_ = HashMap(key_size, value_serializer=value_serializer, map_=dict_)
        return dict_.serialize()

    def store_tlb(self, tlb) -> "Builder":
        return self.store_cell(tlb.serialize())

    def end_cell(self) -> Cell:
        return Cell(self._bits, self._refs, self._type)

    def __repr__(self) -> str:
        return f'<Builder {len(self.bits)}[{self.bits.tobytes().hex().upper()}] -> {len(self.refs)} refs>'
