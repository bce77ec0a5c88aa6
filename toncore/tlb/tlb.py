import typing
from abc import ABC, abstractmethod

from ..boc.cell import Cell
from ..boc.slice import Slice


class TlbError(BaseException):
    pass


class SchemaMismatch(TlbError):
    pass


class TlbScheme(ABC):
    """
    Base for typed cell layouts: serialize() builds a cell, deserialize(cell_slice) reads one.
    """
    @abstractmethod
    def serialize(self, *args) -> Cell: ...

    @classmethod
    @abstractmethod
    def deserialize(cls, cell_slice: Slice, *args): ...

    @classmethod
    def from_cell(cls, cell: Cell, strict: bool = False):
        """
        :param strict: raise UnexpectedData if the cell has more data than the scheme reads
        """
        cell_slice = cell.begin_parse()
        result = cls.deserialize(cell_slice)
        if strict:
            cell_slice.ensure_empty()
        return result

    @classmethod
    def from_boc(cls, data: typing.Union[bytes, bytearray, str], strict: bool = False):
        return cls.from_cell(Cell.one_from_boc(data), strict)

    def to_boc(self, has_idx: bool = False, hash_crc32: bool = False) -> bytes:
        return self.serialize().to_boc(has_idx=has_idx, hash_crc32=hash_crc32)

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.__dict__}>'
