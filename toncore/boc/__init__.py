from .exceptions import CellError, CapacityExceeded, TooManyReferences, BufferUnderflow, RefUnderflow, \
    UnexpectedData, MalformedBoc
from .tvm_bitarray import TvmBitarray, MAX_BITS
from .exotic import CellTypes, LevelMask
from .cell import Cell
from .address import Address, ExternalAddress, VarAddress, Anycast, AddressError, InvalidChecksum, InvalidLength, \
    InvalidWorkchain
from .builder import Builder
from .slice import Slice
from .deserialize import Boc
from .dict import HashMap, DictError, CorruptDict


def begin_cell() -> Builder:
    return Builder()
