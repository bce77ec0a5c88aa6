import typing

from .tlb import TlbScheme
from ..boc import Slice, Builder, Cell, HashMap


class CurrencyCollection(TlbScheme):
    """
    currencies$_ grams:Grams other:ExtraCurrencyCollection = CurrencyCollection;
    """

    def __init__(self, grams: int, other: typing.Optional["ExtraCurrencyCollection"] = None) -> None:
        self.grams = grams
        if other is None:
            other = ExtraCurrencyCollection({})
        self.other = other

    def serialize(self) -> Cell:
        return Builder().store_coins(self.grams).store_cell(self.other.serialize()).end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        grams = cell_slice.load_coins()
        other = ExtraCurrencyCollection.deserialize(cell_slice)
        return cls(grams, other)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CurrencyCollection):
            return NotImplemented
        return self.grams == other.grams and self.other == other.other

    def __repr__(self):
        return f"{{'grams': {self.grams}, 'other': {self.other.dict}}}"


class ExtraCurrencyCollection(TlbScheme):
    """
    extra_currencies$_ dict:(HashmapE 32 (VarUInteger 32)) = ExtraCurrencyCollection
    """

    def __init__(self, dict_: typing.Optional[typing.Dict[int, int]]):
        self.dict = dict_ or {}

    def serialize(self) -> Cell:
        hashmap = HashMap(32, value_serializer=lambda src, dest: dest.store_var_uint(src, 5), map_=self.dict)
        return Builder().store_dict(hashmap).end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        dict_ = cell_slice.load_dict(32, value_deserializer=lambda src: src.load_var_uint(5))
        return cls(dict_)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ExtraCurrencyCollection):
            return NotImplemented
        return self.dict == other.dict
