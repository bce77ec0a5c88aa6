import hashlib
import random

import pytest

from toncore.boc import Builder, Cell, CellTypes, HashMap, begin_cell
from toncore.boc.address import Address
from toncore.boc.dict import DictError, CorruptDict, int_key, bytes_key, address_key


def test_same_label():
    """
    one key 0 in 8 bits dict: hml_same$11 v:0 n:8 (4 bits) is the shortest label
    """
    cell = HashMap(8, map_={0: 5}).with_uint_values(8).serialize()
    assert cell.bits.to01() == '1101000' + '00000101'
    assert not cell.refs


def test_long_label():
    cell = HashMap(8, map_={179: 5}).with_uint_values(8).serialize()
    assert cell.bits.to01() == '10' + '1000' + '10110011' + '00000101'


def test_short_label_wins_tie():
    # short and long labels both take 4 bits here
    cell = HashMap(1, map_={1: 0}).with_uint_values(0).serialize()
    assert cell.bits.to01() == '0101'


def test_fork():
    cell = HashMap(2, map_={0: 1, 3: 2}).with_uint_values(2).serialize()
    # empty root label, then left 0 and right 3 with 1 bit labels
    assert cell.bits.to01() == '00'
    assert len(cell.refs) == 2
    assert cell[0].bits.to01() == '0100' + '01'
    assert cell[1].bits.to01() == '0101' + '10'


def test_round_trip():
    rnd = random.Random(1)
    items = {rnd.getrandbits(64): rnd.getrandbits(32) for _ in range(200)}
    hashmap = HashMap(64).with_uint_values(32)
    for k, v in items.items():
        hashmap.set(k, v)
    assert len(hashmap) == len(items)
    cell = begin_cell().store_dict(hashmap).end_cell()
    parsed = cell.begin_parse().load_dict(64, value_deserializer=lambda cs: cs.load_uint(32))
    assert parsed == items
    assert list(parsed) == sorted(items)


def test_insertion_order_does_not_matter():
    keys = list(range(0, 1000, 7))
    first = HashMap(16).with_uint_values(16)
    second = HashMap(16).with_uint_values(16)
    for k in keys:
        first.set(k, k * 2)
    for k in reversed(keys):
        second.set(k, k * 2)
    assert first.serialize() == second.serialize()


def test_signed_keys():
    hashmap = HashMap(8, signed_keys=True).with_int_values(8)
    hashmap.set(-1, -5).set(3, 7).set(-128, 0)
    cell = hashmap.serialize()
    parsed = HashMap.parse(cell.begin_parse(), 8, key_deserializer=int_key,
                           value_deserializer=lambda cs: cs.load_int(8))
    assert parsed == {-1: -5, 3: 7, -128: 0}

    restored = HashMap.from_cell(cell, 8, signed_keys=True)
    assert restored.get(-1).load_int(8) == -5
    assert restored.get(100) is None

    with pytest.raises(DictError):
        hashmap.set(128, 1)
    with pytest.raises(DictError):
        HashMap(8).set(256, 1)
    with pytest.raises(DictError):
        HashMap(8).set(-1, 1)


def test_address_keys():
    address = Address('EQDk2VTvn04SUKJrW7rXahzdF8_Qi6utb0wj43InCu9vdjrR')
    hashmap = HashMap(267).with_coins_values()
    hashmap.set(address, 15)
    parsed = HashMap.parse(hashmap.serialize().begin_parse(), 267, key_deserializer=address_key,
                           value_deserializer=lambda cs: cs.load_coins())
    assert parsed == {address: 15}

    with pytest.raises(DictError):
        HashMap(256).set(address, 1)


def test_hash_and_bytes_keys():
    hashmap = HashMap(256, value_serializer=lambda src, dest: dest.store_snake_string(src))
    hashmap.set('name', 'toncore', hash_key=True)
    hashmap.set(b'\x00' * 31 + b'\x01', 'one')
    parsed = HashMap.parse(hashmap.serialize().begin_parse(), 256, key_deserializer=bytes_key,
                           value_deserializer=lambda cs: cs.load_snake_string())
    assert parsed == {
        hashlib.sha256(b'name').digest(): 'toncore',
        b'\x00' * 31 + b'\x01': 'one',
    }

    with pytest.raises(DictError):
        HashMap(32).set(b'abcde', 1)
    with pytest.raises(DictError):
        HashMap(32).set(1.5, 1)


def test_default_values():
    value = begin_cell().store_uint(7, 3).store_ref(Cell.empty()).end_cell()
    hashmap = HashMap(4).set(1, value).set(2, value.begin_parse()).set(3, value.to_builder())
    parsed = HashMap.parse(hashmap.serialize().begin_parse(), 4, value_deserializer=lambda cs: cs.to_cell())
    assert parsed == {1: value, 2: value, 3: value}


def test_empty_dict():
    assert HashMap(8).serialize() is None
    assert begin_cell().store_dict(HashMap(8)).end_cell().bits.to01() == '0'
    assert begin_cell().store_dict(None).end_cell().bits.to01() == '0'
    assert begin_cell().store_dict(HashMap(8)).end_cell().begin_parse().load_dict(8) is None
    with pytest.raises(DictError):
        begin_cell().store_hashmap(HashMap(8))


def test_store_plain_dict():
    cell = begin_cell()\
        .store_dict({1: 2, 3: 4}, key_size=8, value_serializer=lambda src, dest: dest.store_uint(src, 8))\
        .end_cell()
    assert cell.begin_parse().load_dict(8, value_deserializer=lambda cs: cs.load_uint(8)) == {1: 2, 3: 4}


def test_inline_hashmap():
    hashmap = HashMap(8, map_={1: 2, 3: 4}).with_uint_values(8)
    cs = begin_cell().store_hashmap(hashmap).store_uint(0xFF, 8).end_cell().begin_parse()
    assert cs.load_hashmap(8, value_deserializer=lambda v: v.load_uint(8)) == {1: 2, 3: 4}
    assert cs.load_uint(8) == 0xFF


def dict_from_bits(bits: str, *refs: Cell) -> Cell:
    builder = begin_cell().store_bits(bits)
    for ref in refs:
        builder.store_ref(ref)
    return builder.end_cell()


@pytest.mark.parametrize('cell', [
    dict_from_bits('10' + '101' + '0000'),  # long label of 5 bits in 4 bits key
    dict_from_bits('0' + '11111' + '0000'),  # short label longer than key
    dict_from_bits('00'),  # fork without refs
    dict_from_bits('00', Cell.empty()),  # fork with one ref
    dict_from_bits('01'),  # unary length is not terminated
    dict_from_bits('10' + '100' + '01'),  # not enough label bits
])
def test_corrupt_dict(cell):
    with pytest.raises(CorruptDict):
        HashMap.parse(cell.begin_parse(), 4)


def test_pruned_subtree_is_skipped():
    cell = HashMap(8, map_={0: 5, 255: 6}).with_uint_values(8).serialize()
    right = cell[1]
    pruned = Builder(type_=CellTypes.pruned_branch)\
        .store_uint(CellTypes.pruned_branch, 8)\
        .store_uint(1, 8)\
        .store_bytes(right.hash)\
        .store_uint(right.depth, 16)\
        .end_cell()
    partial = begin_cell().store_bits(cell.bits).store_ref(cell[0]).store_ref(pruned).end_cell()
    assert partial.get_hash(0) == cell.hash

    parsed = HashMap.parse(partial.begin_parse(), 8, value_deserializer=lambda cs: cs.load_uint(8))
    assert parsed == {0: 5}
