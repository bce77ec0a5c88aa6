import pytest

from toncore.boc import Cell, Builder, Slice, CellTypes, begin_cell
from toncore.boc.address import Address
from toncore.boc.exceptions import CellError, CapacityExceeded, TooManyReferences, BufferUnderflow, RefUnderflow, \
    UnexpectedData


EMPTY_CELL_HASH = '96a296d224f285c67bee93c30f8a309157f0daa35dc5b87e410b78630a09cfc7'


def test_empty_cell_hash():
    assert Cell.empty().hash.hex() == EMPTY_CELL_HASH
    assert begin_cell().end_cell() == Cell.empty()
    assert Cell.empty().depth == 0


def test_capacity():
    begin_cell().store_bits('1' * 1023).end_cell()
    with pytest.raises(CapacityExceeded):
        begin_cell().store_bits('1' * 1024)

    builder = begin_cell().store_uint(0, 1020)
    with pytest.raises(CapacityExceeded):
        builder.store_uint(0, 4)
    # failed store leaves builder untouched
    assert len(builder.bits) == 1020
    builder.store_uint(5, 3)
    assert builder.remaining_bits == 0

    builder = begin_cell()
    for _ in range(4):
        builder.store_ref(Cell.empty())
    builder.end_cell()
    with pytest.raises(TooManyReferences):
        builder.store_ref(Cell.empty())

    with pytest.raises(CapacityExceeded):
        Cell([1] * 1024, [])
    with pytest.raises(TooManyReferences):
        Cell([], [Cell.empty()] * 5)


def test_int_ranges():
    with pytest.raises(CellError):
        begin_cell().store_uint(256, 8)
    with pytest.raises(CellError):
        begin_cell().store_uint(-1, 8)
    with pytest.raises(CellError):
        begin_cell().store_int(128, 8)
    with pytest.raises(CellError):
        begin_cell().store_int(-129, 8)
    cs = begin_cell().store_int(-128, 8).store_int(127, 8).store_uint(255, 8).end_cell().begin_parse()
    assert cs.load_int(8) == -128
    assert cs.load_int(8) == 127
    assert cs.load_uint(8) == 255


def test_builder_and_slice():
    child = begin_cell().store_string('child').end_cell()
    address = Address('EQDk2VTvn04SUKJrW7rXahzdF8_Qi6utb0wj43InCu9vdjrR')
    cell = begin_cell()\
        .store_bit(1)\
        .store_bool(False)\
        .store_uint(12345, 32)\
        .store_int(-7, 16)\
        .store_coins(10 ** 9)\
        .store_var_uint(0, 3)\
        .store_var_int(-1000, 4)\
        .store_address(address)\
        .store_address(None)\
        .store_maybe_ref(child)\
        .store_maybe_ref(None)\
        .store_bytes(b'\x01\x02')\
        .end_cell()

    cs = cell.begin_parse()
    assert cs.load_bit() == 1
    assert cs.load_bool() is False
    assert cs.preload_uint(32) == 12345
    assert cs.load_uint(32) == 12345
    assert cs.load_int(16) == -7
    assert cs.preload_coins() == 10 ** 9
    assert cs.load_coins() == 10 ** 9
    assert cs.load_var_uint(3) == 0
    assert cs.load_var_int(4) == -1000
    assert cs.load_address() == address
    assert cs.load_address() is None
    assert cs.load_maybe_ref() == child
    assert cs.load_maybe_ref() is None
    assert cs.load_bytes(2) == b'\x01\x02'
    cs.ensure_empty()

    # the cell stays the same after reading
    assert cell.begin_parse().load_bit() == 1


def test_slice_underflow():
    cs = begin_cell().store_uint(3, 4).store_ref(Cell.empty()).end_cell().begin_parse()
    with pytest.raises(BufferUnderflow):
        cs.load_uint(5)
    with pytest.raises(UnexpectedData):
        cs.ensure_empty()
    assert cs.load_uint(4) == 3
    assert cs.load_ref() == Cell.empty()
    with pytest.raises(RefUnderflow):
        cs.load_ref()
    with pytest.raises(BufferUnderflow):
        cs.load_bit()
    cs.ensure_empty()


def test_store_slice_and_cell():
    cell = begin_cell().store_uint(1, 8).store_ref(Cell.empty()).store_uint(2, 8).end_cell()
    cs = cell.begin_parse()
    cs.skip_bits(8)
    copy = begin_cell().store_slice(cs).end_cell()
    assert copy.begin_parse().load_uint(8) == 2
    assert len(copy.refs) == 1
    assert begin_cell().store_cell(cell).end_cell() == cell
    assert cell.to_builder().end_cell() == cell


def test_snake_string():
    text = 'toncore ' * 100
    cell = begin_cell().store_uint(0, 32).store_snake_string(text).end_cell()
    assert len(cell.refs) == 1
    cs = cell.begin_parse()
    assert cs.load_uint(32) == 0
    assert cs.load_snake_string() == text


def test_cell_is_deterministic():
    a = begin_cell().store_uint(7, 3).store_ref(begin_cell().store_bit(1).end_cell()).end_cell()
    b = begin_cell().store_uint(7, 3).store_ref(begin_cell().store_bit(1).end_cell()).end_cell()
    c = begin_cell().store_uint(7, 3).store_ref(begin_cell().store_bit(0).end_cell()).end_cell()
    assert a == b and hash(a) == hash(b)
    assert a != c
    assert a.depth == 1
    assert a[0] == begin_cell().store_bit(1).end_cell()


def create_pruned(cell: Cell) -> Cell:
    return Builder(type_=CellTypes.pruned_branch)\
        .store_uint(CellTypes.pruned_branch, 8)\
        .store_uint(1, 8)\
        .store_bytes(cell.hash)\
        .store_uint(cell.depth, 16)\
        .end_cell()


def test_pruned_branch_keeps_hash():
    data = begin_cell().store_uint(0xdeadbeef, 32).store_ref(Cell.empty()).end_cell()
    parent = begin_cell().store_uint(1, 8).store_ref(data).end_cell()

    pruned = create_pruned(data)
    assert pruned.is_exotic
    assert pruned.level_mask.level == 1
    assert pruned.get_hash(0) == data.hash
    assert pruned.get_depth(0) == data.depth

    pruned_parent = begin_cell().store_uint(1, 8).store_ref(pruned).end_cell()
    assert pruned_parent.level_mask.level == 1
    assert pruned_parent.get_hash(0) == parent.hash
    assert pruned_parent.get_depth(0) == parent.depth

    proof = Builder(type_=CellTypes.merkle_proof)\
        .store_uint(CellTypes.merkle_proof, 8)\
        .store_bytes(pruned_parent.get_hash(0))\
        .store_uint(pruned_parent.get_depth(0), 16)\
        .store_ref(pruned_parent)\
        .end_cell()
    assert proof.level_mask.level == 0

    restored = Cell.one_from_boc(proof.to_boc())
    assert restored == proof
    assert restored.type_ == CellTypes.merkle_proof
    assert restored[0][0].get_hash(0) == data.hash


def test_invalid_exotic():
    data = begin_cell().store_uint(1, 8).end_cell()
    with pytest.raises(CellError):
        Builder(type_=CellTypes.merkle_proof)\
            .store_uint(CellTypes.merkle_proof, 8)\
            .store_bytes(b'\x00' * 32)\
            .store_uint(data.depth, 16)\
            .store_ref(data)\
            .end_cell()
    with pytest.raises(CellError):
        # pruned branch must have exact size
        Builder(type_=CellTypes.pruned_branch).store_uint(1, 8).store_uint(1, 8).end_cell()
    with pytest.raises(CellError):
        Builder(type_=CellTypes.library_ref).store_uint(2, 8).store_bytes(b'\x00' * 31).end_cell()


def test_slice_copy_independent():
    cs = begin_cell().store_uint(0xAB, 8).end_cell().begin_parse()
    copy = cs.copy()
    assert copy.load_uint(4) == 0xA
    assert cs.remaining_bits == 8
    assert isinstance(copy, Slice)
