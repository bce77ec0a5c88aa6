from typing import Union, Iterable

from bitarray import bitarray, frozenbitarray

from .exceptions import CellError, CapacityExceeded


MAX_BITS = 1023

BytesLike = Union[bytes, bytearray, Iterable[int]]


class TvmBitarray(bitarray):
    """
    bitarray which refuses to grow past the cell capacity.
    Every write checks the room first, so a failed write leaves the array untouched.
    """

    def __new__(cls, size: int = MAX_BITS, *args, **kwargs):
        return super().__new__(cls, *args, **kwargs)

    def __init__(self, size: int = MAX_BITS, *args, **kwargs):
        if size > MAX_BITS:
            raise CellError(f'bitarray size must be <= {MAX_BITS}, got {size}')
        self._size = size
        super().__init__()

    @property
    def capacity(self) -> int:
        # slices and copies are created without __init__
        return getattr(self, '_size', MAX_BITS)

    @property
    def remaining(self) -> int:
        return self.capacity - len(self)

    def check_overflow(self, length: int) -> None:
        if len(self) + length > self.capacity:
            raise CapacityExceeded(f'bitstring overflow: {len(self)} + {length} > {self.capacity}')

    def extend(self, x: Union[str, Iterable[int]]) -> None:
        self.check_overflow(len(x))
        super().extend(x)

    def append(self, value: int) -> None:
        self.check_overflow(1)
        super().append(value)

    def frombytes(self, a: BytesLike) -> None:
        self.check_overflow(len(a) * 8)
        super().frombytes(a)

    def to_bitarray(self) -> bitarray:
        return bitarray(self)


BitarrayLike = Union[TvmBitarray, bitarray, frozenbitarray]
