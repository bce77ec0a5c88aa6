import enum
import typing

from ..boc.builder import Builder
from ..boc.cell import Cell, MAX_REFS
from ..boc.slice import Slice


class EitherLayout(str, enum.Enum):
    """
    How Either X ^X value is (or has to be) stored.
    native chooses inline if value bits are less than builder remaining bits and its refs fit, otherwise ref.
    """
    native = 'native'
    inline = 'inline'
    ref = 'ref'


def fits_inline(builder: Builder, cell: Cell, reserve_bits: int = 0, reserve_refs: int = 0) -> bool:
    """
    Checks that Either bit and cell bits and refs fit into the builder, keeping reserve_bits and reserve_refs free
    """
    return len(cell.bits) + 1 + reserve_bits <= builder.remaining_bits \
        and len(builder.refs) + len(cell.refs) + reserve_refs <= MAX_REFS


def store_either(builder: Builder, cell: Cell, layout: EitherLayout = EitherLayout.native,
                 reserve_bits: int = 0, reserve_refs: int = 0) -> Builder:
    """
    Either X ^X: left$0 stores the value inline, right$1 stores it in a ref
    """
    if layout == EitherLayout.native:
        layout = EitherLayout.inline if fits_inline(builder, cell, reserve_bits, reserve_refs) else EitherLayout.ref
    if layout == EitherLayout.inline:
        return builder.store_bit(0).store_cell(cell)
    return builder.store_bit(1).store_ref(cell)


def load_either(cell_slice: Slice, deserializer: typing.Callable) -> typing.Tuple[typing.Any, EitherLayout]:
    """
    :param deserializer: Slice -> value
    :return: value and layout it was stored with
    """
    if cell_slice.load_bit():
        return deserializer(cell_slice.load_ref().begin_parse()), EitherLayout.ref
    return deserializer(cell_slice), EitherLayout.inline


def load_rest(cell_slice: Slice) -> Cell:
    """
    Loads remaining bits and refs of the slice as a cell
    """
    cell = cell_slice.to_cell()
    cell_slice.skip_bits(cell_slice.remaining_bits)
    cell_slice.ref_offset = len(cell_slice.refs)
    return cell
