import typing

from ..tlb import TlbScheme, SchemaMismatch
from ..utils import EitherLayout, store_either, load_either, load_rest
from ...boc import Cell, Builder, Slice, Address


NFT_TRANSFER_OP = 0x5fcc3d14


class NftTransfer(TlbScheme):
    """
    transfer#5fcc3d14 query_id:uint64 new_owner:MsgAddress response_destination:MsgAddress
    custom_payload:(Maybe ^Cell) forward_amount:(VarUInteger 16)
    forward_payload:(Either Cell ^Cell) = InternalMsgBody;
    """
    op = NFT_TRANSFER_OP

    def __init__(self,
                 query_id: int = 0,
                 new_owner: typing.Optional[Address] = None,
                 response_destination: typing.Optional[Address] = None,
                 custom_payload: typing.Optional[Cell] = None,
                 forward_amount: int = 0,
                 forward_payload: typing.Optional[Cell] = None,
                 forward_payload_layout: EitherLayout = EitherLayout.native
                 ):
        if isinstance(new_owner, str):
            new_owner = Address(new_owner)
        if isinstance(response_destination, str):
            response_destination = Address(response_destination)
        if forward_payload is None:
            forward_payload = Cell.empty()
        self.query_id = query_id
        self.new_owner = new_owner
        self.response_destination = response_destination
        self.custom_payload = custom_payload
        self.forward_amount = forward_amount
        self.forward_payload = forward_payload
        self.forward_payload_layout = EitherLayout(forward_payload_layout)

    def serialize(self) -> Cell:
        builder = Builder()\
            .store_uint(self.op, 32)\
            .store_uint(self.query_id, 64)\
            .store_address(self.new_owner)\
            .store_address(self.response_destination)\
            .store_maybe_ref(self.custom_payload)\
            .store_coins(self.forward_amount)
        return store_either(builder, self.forward_payload, self.forward_payload_layout).end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        op = cell_slice.load_uint(32)
        if op != cls.op:
            raise SchemaMismatch(f'NftTransfer deserialization error: unknown prefix tag {op:#x}')
        query_id = cell_slice.load_uint(64)
        new_owner = cell_slice.load_address()
        response_destination = cell_slice.load_address()
        custom_payload = cell_slice.load_maybe_ref()
        forward_amount = cell_slice.load_coins()
        forward_payload, layout = load_either(cell_slice, load_rest)
        return cls(query_id, new_owner, response_destination, custom_payload, forward_amount, forward_payload, layout)

    def __eq__(self, other) -> bool:
        if not isinstance(other, NftTransfer):
            return NotImplemented
        return self.serialize() == other.serialize()
