import typing

from bitarray import bitarray, frozenbitarray

from ..exceptions import BufferUnderflow, RefUnderflow
from ..slice import Slice


class DictError(BaseException):
    pass


class CorruptDict(DictError):
    pass


def load_label(cs: Slice, max_length: int) -> bitarray:
    if not cs.load_bit():
        # hml_short$0
        length = 0
        while cs.load_bit():
            length += 1
            if length > max_length:
                raise CorruptDict(f'label is longer than remaining key length {max_length}')
        return bitarray(cs.load_bits(length))
    if not cs.load_bit():
        # hml_long$10
        length = cs.load_uint(max_length.bit_length())
        if length > max_length:
            raise CorruptDict(f'label length {length} is more than remaining key length {max_length}')
        return bitarray(cs.load_bits(length))
    # hml_same$11
    value = cs.load_bit()
    length = cs.load_uint(max_length.bit_length())
    if length > max_length:
        raise CorruptDict(f'label length {length} is more than remaining key length {max_length}')
    return bitarray([value] * length)


def parse_hashmap(dict_slice: Slice, key_length: int) -> typing.Dict[frozenbitarray, Slice]:
    """
    Walks Hashmap tree without recursion. Pruned branches (in merkle proofs) are skipped.
    :return: key bits -> leaf slice, in ascending key order
    """
    result = {}
    stack = [(dict_slice, key_length, bitarray())]
    while stack:
        cs, m, prefix = stack.pop()
        if cs.is_special():
            continue
        try:
            label = load_label(cs, m)
        except BufferUnderflow as e:
            raise CorruptDict(f'not enough bits for label: {e}') from e
        prefix = prefix + label
        m -= len(label)

        if m == 0:  # leaf
            key = frozenbitarray(prefix)
            if key in result:
                raise CorruptDict(f'duplicate key {key.to01()}')
            result[key] = cs
            continue

        # fork
        try:
            left, right = cs.load_ref(), cs.load_ref()
        except RefUnderflow as e:
            raise CorruptDict(f'fork at {prefix.to01()} must have 2 refs') from e
        stack.append((right.begin_parse(), m - 1, prefix + bitarray('1')))
        stack.append((left.begin_parse(), m - 1, prefix + bitarray('0')))
    return result
