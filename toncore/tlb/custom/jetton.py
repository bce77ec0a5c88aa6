import typing

from ..tlb import TlbScheme, TlbError, SchemaMismatch
from ..utils import EitherLayout, store_either, load_either, load_rest
from ...boc import Cell, Builder, Slice, Address


JETTON_TRANSFER_OP = 0x0f8a7ea5


class JettonTransfer(TlbScheme):
    """
    transfer#0f8a7ea5 query_id:uint64 amount:(VarUInteger 16) destination:MsgAddress
    response_destination:MsgAddress custom_payload:(Maybe ^Cell)
    forward_ton_amount:(VarUInteger 16) forward_payload:(Either Cell ^Cell) = InternalMsgBody;
    """
    op = JETTON_TRANSFER_OP

    def __init__(self,
                 query_id: int = 0,
                 amount: int = 0,
                 destination: typing.Optional[Address] = None,
                 response_destination: typing.Optional[Address] = None,
                 custom_payload: typing.Optional[Cell] = None,
                 forward_ton_amount: int = 0,
                 forward_payload: typing.Optional[Cell] = None,
                 forward_payload_layout: EitherLayout = EitherLayout.native
                 ):
        if isinstance(destination, str):
            destination = Address(destination)
        if isinstance(response_destination, str):
            response_destination = Address(response_destination)
        if forward_payload is None:
            forward_payload = Cell.empty()
        self.query_id = query_id
        self.amount = amount
        self.destination = destination
        self.response_destination = response_destination
        self.custom_payload = custom_payload
        self.forward_ton_amount = forward_ton_amount
        self.forward_payload = forward_payload
        self.forward_payload_layout = EitherLayout(forward_payload_layout)

    def serialize(self) -> Cell:
        if self.forward_ton_amount == 0 and self.forward_payload != Cell.empty():
            raise TlbError('JettonTransfer: forward_payload requires positive forward_ton_amount')
        builder = Builder()\
            .store_uint(self.op, 32)\
            .store_uint(self.query_id, 64)\
            .store_coins(self.amount)\
            .store_address(self.destination)\
            .store_address(self.response_destination)\
            .store_maybe_ref(self.custom_payload)\
            .store_coins(self.forward_ton_amount)
        return store_either(builder, self.forward_payload, self.forward_payload_layout).end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        op = cell_slice.load_uint(32)
        if op != cls.op:
            raise SchemaMismatch(f'JettonTransfer deserialization error: unknown prefix tag {op:#x}')
        query_id = cell_slice.load_uint(64)
        amount = cell_slice.load_coins()
        destination = cell_slice.load_address()
        response_destination = cell_slice.load_address()
        custom_payload = cell_slice.load_maybe_ref()
        forward_ton_amount = cell_slice.load_coins()
        forward_payload, layout = load_either(cell_slice, load_rest)
        cell_slice.ensure_empty()
        return cls(query_id, amount, destination, response_destination, custom_payload,
                   forward_ton_amount, forward_payload, layout)

    def __eq__(self, other) -> bool:
        if not isinstance(other, JettonTransfer):
            return NotImplemented
        return self.serialize() == other.serialize()
