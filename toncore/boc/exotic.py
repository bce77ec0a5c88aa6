"""
Exotic (special) cells and level masks, see https://docs.ton.org/tvm.pdf 3.1.2 - 3.1.7
"""
import typing

from bitarray.util import ba2int

from .exceptions import CellError


class CellTypes:
    ordinary = -1
    pruned_branch = 1
    library_ref = 2
    merkle_proof = 3
    merkle_update = 4

    @classmethod
    def is_known(cls, type_: int) -> bool:
        return type_ in (cls.pruned_branch, cls.library_ref, cls.merkle_proof, cls.merkle_update)


class LevelMask:
    # https://github.com/xssnick/tonutils-go/blob/master/tvm/cell/level.go#L17
    def __init__(self, m: int):
        self._m = m
        self._level = self._m.bit_length()
        self._hash_index = bin(self._m).count("1")

    @property
    def mask(self) -> int:
        return self._m

    @property
    def level(self) -> int:
        return self._level

    @property
    def hash_index(self) -> int:
        return self._hash_index

    @property
    def hash_count(self) -> int:
        return self._hash_index + 1

    def apply(self, level: int) -> "LevelMask":
        return LevelMask(self._m & ((1 << level) - 1))

    def is_significant(self, level: int) -> bool:
        return level == 0 or (self._m >> (level - 1)) % 2 != 0

    def __eq__(self, other) -> bool:
        if not isinstance(other, LevelMask):
            return NotImplemented
        return self._m == other._m

    def __repr__(self) -> str:
        return f'<LevelMask {self._m:03b}>'


def check_exotic(bits, refs: typing.Sequence, type_: int) -> None:
    """
    Checks layout of a special cell. Merkle cells also check that stored hashes and depths
    match the hashes and depths of the referenced cells.
    """
    if len(bits) < 8:
        raise CellError('exotic cell must have at least 8 bits')
    tag = ba2int(bits[:8], signed=False)
    if tag != type_:
        raise CellError(f'exotic cell type {type_} does not match data tag {tag}')

    if type_ == CellTypes.pruned_branch:
        if refs:
            raise CellError('pruned branch must not have refs')
        if len(bits) < 16:
            raise CellError('pruned branch must have at least 16 bits')
        mask = LevelMask(ba2int(bits[8:16], signed=False))
        if not 1 <= mask.level <= 3:
            raise CellError(f'pruned branch has invalid level {mask.level}')
        expected = (2 + mask.apply(mask.level - 1).hash_count * (32 + 2)) * 8
        if len(bits) != expected:
            raise CellError(f'pruned branch must have {expected} bits, got {len(bits)}')

    elif type_ == CellTypes.library_ref:
        if len(bits) != 8 + 256:
            raise CellError(f'library cell must have 264 bits, got {len(bits)}')

    elif type_ == CellTypes.merkle_proof:
        if len(bits) != 8 + 256 + 16 or len(refs) != 1:
            raise CellError('merkle proof must have 280 bits and 1 ref')
        _check_merkle_ref(bits, 8, refs[0])

    elif type_ == CellTypes.merkle_update:
        if len(bits) != 8 + 2 * (256 + 16) or len(refs) != 2:
            raise CellError('merkle update must have 552 bits and 2 refs')
        _check_merkle_ref(bits, 8, refs[0], depth_offset=8 + 512)
        _check_merkle_ref(bits, 8 + 256, refs[1], depth_offset=8 + 512 + 16)

    else:
        raise CellError(f'unknown exotic cell type {type_}')


def _check_merkle_ref(bits, hash_offset: int, ref, depth_offset: typing.Optional[int] = None) -> None:
    if depth_offset is None:
        depth_offset = hash_offset + 256
    if bits[hash_offset:hash_offset + 256].tobytes() != ref.get_hash(0):
        raise CellError('merkle cell hash mismatch')
    if ba2int(bits[depth_offset:depth_offset + 16], signed=False) != ref.get_depth(0):
        raise CellError('merkle cell depth mismatch')
