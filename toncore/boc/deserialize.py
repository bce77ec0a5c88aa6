import base64
import binascii
import logging
import math
import typing
from collections import deque

from bitarray import bitarray

from .cell import Cell, MAX_REFS
from .exceptions import CellError, MalformedBoc
from .exotic import CellTypes, LevelMask
from ..crypto.crc import crc32c


logger = logging.getLogger('toncore.boc')

# https://github.com/ton-blockchain/ton/blob/24dc184a2ea67f9c47042b4104bbb4d82289fac1/crypto/tl/boc.tlb#L25
SERIALIZED_BOC_IDX_CRC32C = b'\xac\xc3\xa7('  # LEAN_BOC_MAGIC_PREFIX_CRC acc3a728
SERIALIZED_BOC_IDX_PREFIX = b'h\xffe\xf3'  # LEAN_BOC_MAGIC_PREFIX 68ff65f3
SERIALIZED_BOC_PREFIX = b'\xb5\xee\x9cr'  # REACH_BOC_MAGIC_PREFIX b5ee9c72


def bytes_to_uint(data: bytes) -> int:
    return int.from_bytes(data, 'big', signed=False)


class Boc:
    """
    Bag of cells.
    Boc(data).deserialize() returns list of root cells,
    Boc.serialize(roots) returns bytes.
    """

    def __init__(self, data: typing.Union[bytes, bytearray, str]):
        if isinstance(data, str):
            try:
                data = bytes.fromhex(data)
            except ValueError:
                try:
                    data = base64.b64decode(data, validate=True)
                except binascii.Error:
                    raise MalformedBoc('boc data in unknown form')
        self.data = bytes(data)
        self.data_len = len(self.data)

    @classmethod
    def from_base64(cls, data: str) -> "Boc":
        return cls(base64.b64decode(data))

    @classmethod
    def from_hex(cls, data: str) -> "Boc":
        return cls(bytes.fromhex(data))

    @staticmethod
    def deserialize_boc_header(data: bytes) -> dict:
        data_len = len(data)
        if data_len < 6:
            raise MalformedBoc(f'not enough bytes to deserialize boc header: {data.hex()}')
        result = {
            'has_idx': True,
            'hash_crc32': False,
            'has_cache_bits': False,
            'flags': 0,
            'size_bytes': 0,
            'offset_bytes': None,
            'cells_num': None,
            'roots_num': None,
            'absent_num': None,
            'tot_cells_size': None,
            'root_list': None,
            'index': None,
            'cells_data': None,
        }
        magic = data[:4]
        if magic == SERIALIZED_BOC_PREFIX:
            flags_byte = data[4]
            result['has_idx'] = bool(flags_byte & 128)
            result['hash_crc32'] = bool(flags_byte & 64)
            result['has_cache_bits'] = bool(flags_byte & 32)
            result['flags'] = (flags_byte >> 3) & 3
            result['size_bytes'] = flags_byte & 7
        elif magic in (SERIALIZED_BOC_IDX_PREFIX, SERIALIZED_BOC_IDX_CRC32C):
            # serialized_boc_idx has no root list, the only root is the first cell
            result['hash_crc32'] = magic == SERIALIZED_BOC_IDX_CRC32C
            result['size_bytes'] = data[4]
        else:
            raise MalformedBoc(f'unknown boc prefix: {magic.hex()}')

        size_bytes = result['size_bytes']
        offset_bytes = data[5]
        result['offset_bytes'] = offset_bytes
        if not 1 <= size_bytes <= 4:
            raise MalformedBoc(f'invalid boc size bytes: {size_bytes}')
        if not 1 <= offset_bytes <= 8:
            raise MalformedBoc(f'invalid boc offset bytes: {offset_bytes}')

        i = 6
        end = i + 3 * size_bytes + offset_bytes
        if data_len < end:
            raise MalformedBoc('not enough bytes to deserialize boc header')
        result['cells_num'], result['roots_num'], result['absent_num'] \
            = [bytes_to_uint(data[j: j + size_bytes]) for j in range(i, i + 3 * size_bytes, size_bytes)]
        result['tot_cells_size'] = bytes_to_uint(data[end - offset_bytes: end])
        i = end

        cells_num = result['cells_num']
        if result['roots_num'] < 1 or result['roots_num'] + result['absent_num'] > cells_num:
            raise MalformedBoc(f'invalid roots number {result["roots_num"]} for {cells_num} cells')
        if cells_num * 2 > result['tot_cells_size']:
            # every cell has at least 2 descriptor bytes
            raise MalformedBoc(f'{cells_num} cells can not fit into {result["tot_cells_size"]} bytes')

        if magic == SERIALIZED_BOC_PREFIX:
            end = i + result['roots_num'] * size_bytes
            if data_len < end:
                raise MalformedBoc('not enough bytes for root list')
            result['root_list'] = [bytes_to_uint(data[j: j + size_bytes]) for j in range(i, end, size_bytes)]
            i = end
        else:
            if result['roots_num'] != 1:
                raise MalformedBoc('indexed boc must have exactly one root')
            result['root_list'] = [0]

        for root in result['root_list']:
            if root >= cells_num:
                raise MalformedBoc(f'root index {root} is out of range, boc has {cells_num} cells')

        if result['has_idx']:
            end = i + cells_num * offset_bytes
            if data_len < end:
                raise MalformedBoc('not enough bytes for index')
            result['index'] = [bytes_to_uint(data[j: j + offset_bytes]) for j in range(i, end, offset_bytes)]
            i = end

        end = i + result['tot_cells_size']
        if data_len < end:
            raise MalformedBoc('not enough bytes for cells data')
        result['cells_data'] = data[i: end]
        i = end

        if result['hash_crc32']:
            if data_len - i < 4:
                raise MalformedBoc('not enough bytes for crc32c hashsum')
            if crc32c(data[: i]) != data[i: i + 4]:
                raise MalformedBoc('crc32c hashsum mismatch')
            i += 4
        if data_len - i:  # != 0
            raise MalformedBoc(f'{data_len - i} extra bytes in boc')
        return result

    @staticmethod
    def deserialize_cell(data: bytes, offset: int, ref_index_size: int) -> typing.Tuple[dict, int]:
        """
        :return: raw cell dict and offset of the next cell
        """
        data_len = len(data)
        if data_len - offset < 2:
            raise MalformedBoc('not enough bytes for cell descriptors')
        refs_descriptor = data[offset]
        level = refs_descriptor >> 5
        total_refs = refs_descriptor & 7
        has_hashes = (refs_descriptor & 16) != 0
        is_exotic = (refs_descriptor & 8) != 0
        if total_refs == 7 and has_hashes:
            raise MalformedBoc('can not deserialize absent cell')
        if total_refs > MAX_REFS:
            raise MalformedBoc(f'cell can not have {total_refs} refs')

        bits_descriptor = data[offset + 1]
        is_augmented = bits_descriptor & 1
        data_size = (bits_descriptor >> 1) + is_augmented
        hashes_size = LevelMask(level).hash_count * (32 + 2) if has_hashes else 0
        i = offset + 2

        if data_len - i < hashes_size + data_size + ref_index_size * total_refs:
            raise MalformedBoc('not enough bytes to encode cell data')

        i += hashes_size
        bits = bitarray()
        bits.frombytes(data[i: i + data_size])
        i += data_size

        if is_augmented:
            if data[i - 1] == 0:
                raise MalformedBoc('augmented cell data must not end with zero byte')
            # strip completion tag: trailing zeros and the one bit before them
            end = len(bits) - 1
            while not bits[end]:
                end -= 1
            del bits[end:]

        cell_type = CellTypes.ordinary
        if is_exotic:
            if len(bits) < 8:
                raise MalformedBoc('not enough bits for an exotic cell type')
            cell_type = bits[:8].tobytes()[0]
            if not CellTypes.is_known(cell_type):
                raise MalformedBoc(f'unknown exotic cell type {cell_type}')

        refs = [bytes_to_uint(data[i + r * ref_index_size: i + (r + 1) * ref_index_size]) for r in range(total_refs)]
        i += total_refs * ref_index_size

        return {'bits': bits, 'refs': refs, 'type': cell_type}, i

    def deserialize(self) -> typing.List[Cell]:
        try:
            return self._deserialize()
        except MalformedBoc:
            raise
        except (ValueError, IndexError, CellError) as e:
            raise MalformedBoc(f'can not deserialize boc: {e}') from e

    def _deserialize(self) -> typing.List[Cell]:
        header = self.deserialize_boc_header(self.data)
        logger.debug(f'boc header: {header["cells_num"]} cells, {header["roots_num"]} roots, '
                     f'idx={header["has_idx"]} crc32c={header["hash_crc32"]} size={header["size_bytes"]}')
        cells_num = header['cells_num']
        cells_data = header['cells_data']
        raw_cells = []

        i = 0
        for _ in range(cells_num):
            cell, i = self.deserialize_cell(cells_data, i, header['size_bytes'])
            raw_cells.append(cell)
        if i != len(cells_data):
            raise MalformedBoc(f'{len(cells_data) - i} extra bytes in cells data')

        cells: typing.List[typing.Optional[Cell]] = [None] * cells_num
        for ci in reversed(range(cells_num)):
            raw = raw_cells[ci]
            refs = []
            for r in raw['refs']:
                if not ci < r < cells_num:
                    raise MalformedBoc(f'cell {ci} has invalid ref index {r}: topological order is broken')
                refs.append(cells[r])
            cells[ci] = Cell(raw['bits'], refs, raw['type'])

        return [cells[ri] for ri in header['root_list']]

    @staticmethod
    def topological_order(roots: typing.List[Cell]) -> typing.List[Cell]:
        """
        Unique cells in breadth-first order where every cell goes after all of its parents
        """
        parents: typing.Dict[bytes, int] = {}
        unique: typing.Dict[bytes, Cell] = {}
        queue = deque()
        for root in roots:
            if root.hash not in unique:
                unique[root.hash] = root
                parents[root.hash] = 0
                queue.append(root)
        while queue:
            cell = queue.popleft()
            for ref in cell.refs:
                if ref.hash not in unique:
                    unique[ref.hash] = ref
                    parents[ref.hash] = 0
                    queue.append(ref)
                parents[ref.hash] += 1

        # roots which are referenced by other roots wait for their parents too
        queue = deque(c for c in unique.values() if parents[c.hash] == 0)
        order = []
        while queue:
            cell = queue.popleft()
            order.append(cell)
            for ref in cell.refs:
                parents[ref.hash] -= 1
                if parents[ref.hash] == 0:
                    queue.append(ref)
        return order

    @staticmethod
    def serialize(roots: typing.List[Cell], has_idx: bool = False, hash_crc32: bool = False,
                  has_cache_bits: bool = False, flags: int = 0) -> bytes:
        if not roots:
            raise CellError('boc must have at least one root')
        if not 0 <= flags <= 3:
            raise CellError(f'boc flags must be in range 0..3, got {flags}')
        if has_cache_bits and not has_idx:
            raise CellError('cache bits can be used only with index')

        order = Boc.topological_order(roots)
        indexes = {c.hash: i for i, c in enumerate(order)}
        cells_num = len(order)
        size_bytes = max(1, math.ceil(cells_num.bit_length() / 8))
        logger.debug(f'serializing boc: {cells_num} unique cells, {len(roots)} roots')

        multi_parent = set()
        if has_cache_bits:
            seen = set()
            for cell in order:
                for ref in cell.refs:
                    if ref.hash in seen:
                        multi_parent.add(ref.hash)
                    seen.add(ref.hash)

        chunks = []
        index = []
        payload_len = 0
        for cell in order:
            chunk = cell.serialize(indexes, size_bytes)
            chunks.append(chunk)
            payload_len += len(chunk)
            index.append(payload_len)
        payload = b''.join(chunks)
        # cache bits take the lowest bit of every index entry
        offset_bytes = max(1, math.ceil((payload_len << has_cache_bits).bit_length() / 8))

        result = SERIALIZED_BOC_PREFIX
        result += (has_idx << 7 | hash_crc32 << 6 | has_cache_bits << 5 | flags << 3 | size_bytes).to_bytes(1, 'big')
        result += offset_bytes.to_bytes(1, 'big')
        result += cells_num.to_bytes(size_bytes, 'big')
        result += len(roots).to_bytes(size_bytes, 'big')
        result += (0).to_bytes(size_bytes, 'big')  # absent cells
        result += len(payload).to_bytes(offset_bytes, 'big')
        for root in roots:
            result += indexes[root.hash].to_bytes(size_bytes, 'big')
        if has_idx:
            for cell, end in zip(order, index):
                if has_cache_bits:
                    end = end * 2 + (cell.hash in multi_parent)
                result += end.to_bytes(offset_bytes, 'big')
        result += payload
        if hash_crc32:
            result += crc32c(result)
        return result
