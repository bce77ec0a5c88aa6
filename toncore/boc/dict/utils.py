"""
Hashmap serialization, see https://docs.ton.org/develop/data-formats/tl-b-types#hashmap
"""
import typing

from bitarray import bitarray, frozenbitarray

from ..builder import Builder
from ..cell import Cell


def label_short_length(label: bitarray) -> int:
    return 1 + len(label) + 1 + len(label)


def label_long_length(label: bitarray, max_length: int) -> int:
    return 1 + 1 + max_length.bit_length() + len(label)


def label_same_length(max_length: int) -> int:
    return 1 + 1 + 1 + max_length.bit_length()


def is_same(label: bitarray) -> bool:
    return label.all() or not label.any()


def detect_label_type(label: bitarray, max_length: int) -> str:
    kind = 'short'
    kind_length = label_short_length(label)

    long_length = label_long_length(label, max_length)
    if long_length < kind_length:
        kind_length = long_length
        kind = 'long'

    if len(label) > 1 and is_same(label):
        same_length = label_same_length(max_length)
        if same_length < kind_length:
            kind = 'same'
    return kind


def write_label(label: bitarray, max_length: int, to: Builder) -> Builder:
    """
    :param label: label bits
    :param max_length: m, remaining key length at this edge
    """
    kind = detect_label_type(label, max_length)
    if kind == 'short':
        # hml_short$0 len:(Unary ~n) s:(n * Bit)
        to.store_bit(0)
        to.store_bits('1' * len(label) + '0')
        to.store_bits(label)
    elif kind == 'long':
        # hml_long$10 n:(#<= m) s:(n * Bit)
        to.store_bits('10')
        to.store_uint(len(label), max_length.bit_length())
        to.store_bits(label)
    else:
        # hml_same$11 v:Bit n:(#<= m)
        to.store_bits('11')
        to.store_bit(label[0])
        to.store_uint(len(label), max_length.bit_length())
    return to


def common_prefix_length(first: bitarray, last: bitarray, offset: int) -> int:
    length = 0
    for a, b in zip(first[offset:], last[offset:]):
        if a != b:
            break
        length += 1
    return length


def write_edge(items: typing.List[typing.Tuple[frozenbitarray, typing.Any]], offset: int, max_length: int,
               serializer: typing.Callable, to: Builder) -> Builder:
    """
    :param items: sorted (key bits, value) pairs which share first offset bits of key
    """
    first_key, last_key = items[0][0], items[-1][0]
    label_len = common_prefix_length(first_key, last_key, offset)
    write_label(first_key[offset: offset + label_len], max_length, to)

    if len(items) == 1:
        serializer(items[0][1], to)
        return to

    fork_at = offset + label_len
    split = next(i for i, (key, _) in enumerate(items) if key[fork_at])
    left = write_edge(items[:split], fork_at + 1, max_length - label_len - 1, serializer, Builder())
    right = write_edge(items[split:], fork_at + 1, max_length - label_len - 1, serializer, Builder())
    to.store_ref(left.end_cell())
    to.store_ref(right.end_cell())
    return to


def serialize_dict(src: typing.Dict[frozenbitarray, typing.Any], key_size: int,
                   serializer: typing.Callable) -> Cell:
    items = sorted(src.items(), key=lambda i: i[0].to01())
    return write_edge(items, 0, key_size, serializer, Builder()).end_cell()
