import hashlib
import typing

from bitarray import bitarray, frozenbitarray

from .exceptions import CellError, CapacityExceeded, TooManyReferences
from .exotic import LevelMask, CellTypes, check_exotic
from .tvm_bitarray import BitarrayLike, MAX_BITS


MAX_REFS = 4
MAX_DEPTH = 1024


class Cell:
    """
    Cell is immutable.
    If you want to read from cell use .begin_parse() method.
    If you want to write to cell use .to_builder() method.

    Hashes and depths for every significant level are calculated once, in constructor.
    """
    def __init__(self, bits: BitarrayLike, refs: typing.Iterable["Cell"], cell_type: int = CellTypes.ordinary) -> None:
        self.bits: frozenbitarray = frozenbitarray(bits)
        self.refs: typing.Tuple["Cell", ...] = tuple(refs)
        self.type_: int = cell_type
        self.is_exotic: bool = cell_type != CellTypes.ordinary

        if len(self.bits) > MAX_BITS:
            raise CapacityExceeded(f'cell can not contain more than {MAX_BITS} bits, got {len(self.bits)}')
        if len(self.refs) > MAX_REFS:
            raise TooManyReferences(f'cell can not contain more than {MAX_REFS} refs, got {len(self.refs)}')
        if self.is_exotic:
            check_exotic(self.bits, self.refs, self.type_)

        self.level_mask: LevelMask = self.resolve_mask()
        self._data_bytes: bytes = self.get_data_bytes()
        self._hashes: typing.List[bytes] = []
        self._depths: typing.List[int] = []
        self.calculate_hashes()

        self._hash = self._hashes[-1]
        self._depth = self._depths[-1]

    @classmethod
    def empty(cls) -> "Cell":
        return cls(bitarray(), [])

    def resolve_mask(self) -> LevelMask:
        if self.type_ == CellTypes.ordinary:
            # ordinary cell level is max of refs levels
            mask = 0
            for r in self.refs:
                mask |= r.level_mask.mask
            return LevelMask(mask)
        elif self.type_ == CellTypes.pruned_branch:
            return LevelMask(int.from_bytes(self.bits[8:16].tobytes(), 'big'))
        elif self.type_ == CellTypes.merkle_proof:
            return LevelMask(self.refs[0].level_mask.mask >> 1)
        elif self.type_ == CellTypes.merkle_update:
            return LevelMask((self.refs[0].level_mask.mask | self.refs[1].level_mask.mask) >> 1)
        elif self.type_ == CellTypes.library_ref:
            return LevelMask(0)
        raise CellError(f'unknown cell type: {self.type_}')

    def to_builder(self):
        from .builder import Builder
        return Builder().store_cell(self)

    def begin_parse(self):
        from .slice import Slice
        return Slice.from_cell(self)

    def get_refs_descriptor(self, lvl_mask: LevelMask) -> bytes:
        # d1 = r + 8s + 32l
        d1 = len(self.refs) + 8 * self.is_exotic + 32 * lvl_mask.mask
        return d1.to_bytes(1, 'big')

    def get_bits_descriptor(self) -> bytes:
        # d2 = ceil(b/8) + floor(b/8)
        bit_len = len(self.bits)
        d2 = (bit_len // 8) * 2
        d2 += 1 if bit_len % 8 else 0
        return d2.to_bytes(1, 'big')

    def get_descriptors(self, lvl_mask: typing.Optional[LevelMask] = None) -> bytes:
        if lvl_mask is None:
            lvl_mask = self.level_mask
        return self.get_refs_descriptor(lvl_mask) + self.get_bits_descriptor()

    def get_data_bytes(self) -> bytes:
        result = bitarray(self.bits)
        if len(result) % 8:
            result.append(1)
            result.fill()
        return result.tobytes()

    def get_hash(self, level: int = 3) -> bytes:
        # https://github.com/ton-blockchain/ton/blob/master/crypto/vm/cells/DataCell.cpp#L287
        hash_index = self.level_mask.apply(level).hash_index
        if self.type_ == CellTypes.pruned_branch:
            pruned_hash_index = self.level_mask.hash_index
            if hash_index != pruned_hash_index:
                # hash of the pruned subtree is stored in cell data
                off = 2 + hash_index * 32
                return self._data_bytes[off: off + 32]
            hash_index = 0
        return self._hashes[hash_index]

    def get_depth(self, level: int = 3) -> int:
        hash_index = self.level_mask.apply(level).hash_index
        if self.type_ == CellTypes.pruned_branch:
            pruned_hash_index = self.level_mask.hash_index
            if hash_index != pruned_hash_index:
                off = 2 + 32 * pruned_hash_index + hash_index * 2
                return int.from_bytes(self._data_bytes[off: off + 2], 'big')
            hash_index = 0
        return self._depths[hash_index]

    def calculate_hashes(self) -> None:
        # https://github.com/xssnick/tonutils-go/blob/master/tvm/cell/proof.go#L169
        total_hash_count = self.level_mask.hash_count
        hash_count = 1 if self.type_ == CellTypes.pruned_branch else total_hash_count
        hash_index_offset = total_hash_count - hash_count
        is_merkle = self.type_ in (CellTypes.merkle_proof, CellTypes.merkle_update)

        hash_index = 0
        for li in range(self.level_mask.level + 1):
            if not self.level_mask.is_significant(li):
                continue
            if hash_index < hash_index_offset:
                hash_index += 1
                continue
            hash_ = hashlib.sha256(self.get_descriptors(self.level_mask.apply(li)))
            if hash_index == hash_index_offset:
                hash_.update(self._data_bytes)
            else:
                hash_.update(self._hashes[hash_index - hash_index_offset - 1])

            child_level = li + 1 if is_merkle else li
            depth = 0
            for r in self.refs:
                ref_depth = r.get_depth(child_level)
                hash_.update(ref_depth.to_bytes(2, 'big'))
                depth = max(depth, ref_depth)
            if self.refs:
                depth += 1
                if depth > MAX_DEPTH:
                    raise CellError(f'cell depth {depth} is more than max depth {MAX_DEPTH}')
            for r in self.refs:
                hash_.update(r.get_hash(child_level))

            self._depths.append(depth)
            self._hashes.append(hash_.digest())
            hash_index += 1

    @property
    def hash(self) -> bytes:
        """
        representation hash of the cell
        """
        return self._hash

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def data(self) -> bytes:
        return self._data_bytes

    def serialize(self, indexes: dict, byte_len: int) -> bytes:
        result = self.get_descriptors() + self._data_bytes
        for ref in self.refs:
            result += indexes[ref.hash].to_bytes(byte_len, 'big')
        return result

    def to_boc(self, has_idx: bool = False, hash_crc32: bool = False, has_cache_bits: bool = False, flags: int = 0) -> bytes:
        from .deserialize import Boc
        return Boc.serialize([self], has_idx=has_idx, hash_crc32=hash_crc32, has_cache_bits=has_cache_bits, flags=flags)

    @classmethod
    def from_boc(cls, data: typing.Union[bytes, bytearray, str]) -> typing.List["Cell"]:
        from .deserialize import Boc
        return Boc(data).deserialize()

    @classmethod
    def one_from_boc(cls, data: typing.Union[bytes, bytearray, str]) -> "Cell":
        cells = cls.from_boc(data)
        if len(cells) != 1:
            raise CellError(f'expected one root cell, got {len(cells)}')
        return cells[0]

    def __hash__(self) -> int:  # for dicts
        return int.from_bytes(self._hash, 'big')

    def __getitem__(self, ref_i: int) -> "Cell":
        """
        my_cell: Cell
        new_cell = begin_cell().store_ref(my_cell).end_cell()
        assert new_cell[0] == my_cell
        """
        return self.refs[ref_i]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Cell):
            return NotImplemented
        return self._hash == other._hash

    def __repr__(self) -> str:
        return f'<Cell {len(self.bits)}[{self.bits.tobytes().hex().upper()}] -> {len(self.refs)} refs>'

    def __str__(self) -> str:
        return self.dump()

    def dump(self, indent: int = 0) -> str:
        lines = []
        stack = [(self, indent)]
        while stack:
            cell, ind = stack.pop()
            prefix = '*' if cell.is_exotic else ''
            lines.append(' ' * ind + f'{prefix}{len(cell.bits)}[{cell.bits.tobytes().hex().upper()}]')
            for ref in reversed(cell.refs):
                stack.append((ref, ind + 1))
        return '\n'.join(lines)
