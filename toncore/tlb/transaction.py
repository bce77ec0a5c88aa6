import typing

from .tlb import TlbScheme, SchemaMismatch
from .account import StateInit
from .block import CurrencyCollection
from .utils import EitherLayout, fits_inline, store_either, load_either, load_rest
from ..boc import Slice, Builder, Cell
from ..boc.address import Address, ExternalAddress


class CommonMsgInfo(TlbScheme):
    """
    int_msg_info$0 ihr_disabled:Bool bounce:Bool bounced:Bool
    src:MsgAddressInt dest:MsgAddressInt
    value:CurrencyCollection ihr_fee:Grams fwd_fee:Grams
    created_lt:uint64 created_at:uint32 = CommonMsgInfo;

    ext_in_msg_info$10 src:MsgAddressExt dest:MsgAddressInt
    import_fee:Grams = CommonMsgInfo;

    ext_out_msg_info$11 src:MsgAddressInt dest:MsgAddressExt
    created_lt:uint64 created_at:uint32 = CommonMsgInfo;
    """

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        tag = cell_slice.preload_bit()
        if not tag:  # 0
            return InternalMsgInfo.deserialize(cell_slice)
        tag = cell_slice.preload_bits(2).to01()
        if tag == '10':
            return ExternalMsgInfo.deserialize(cell_slice)
        # 11
        return ExternalOutMsgInfo.deserialize(cell_slice)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CommonMsgInfo):
            return NotImplemented
        return self.serialize() == other.serialize()


class InternalMsgInfo(CommonMsgInfo):
    """
    int_msg_info$0 ihr_disabled:Bool bounce:Bool bounced:Bool
    src:MsgAddressInt dest:MsgAddressInt
    value:CurrencyCollection ihr_fee:Grams fwd_fee:Grams
    created_lt:uint64 created_at:uint32 = CommonMsgInfo;
    """
    def __init__(self, ihr_disabled: bool = True, bounce: bool = True, bounced: bool = False,
                 src: typing.Optional[Address] = None, dest: typing.Optional[Address] = None,
                 value: typing.Union[CurrencyCollection, int] = 0, ihr_fee: int = 0, fwd_fee: int = 0,
                 created_lt: int = 0, created_at: int = 0):
        if isinstance(value, int):
            value = CurrencyCollection(value)
        self.ihr_disabled = ihr_disabled
        self.bounce = bounce
        self.bounced = bounced
        self.src = src
        self.dest = dest
        self.value = value
        self.value_coins: int = value.grams
        self.ihr_fee = ihr_fee
        self.fwd_fee = fwd_fee
        self.created_lt = created_lt
        self.created_at = created_at

    def serialize(self) -> Cell:
        builder = Builder()
        builder.store_bit(0)  # $0
        return builder\
            .store_bool(self.ihr_disabled)\
            .store_bool(self.bounce)\
            .store_bool(self.bounced)\
            .store_address(self.src)\
            .store_address(self.dest)\
            .store_cell(self.value.serialize())\
            .store_coins(self.ihr_fee)\
            .store_coins(self.fwd_fee)\
            .store_uint(self.created_lt, 64)\
            .store_uint(self.created_at, 32)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        tag = cell_slice.load_bit()
        if tag:
            raise SchemaMismatch(f'InternalMsgInfo deserialization error unknown prefix tag: {tag}')
        return cls(
            ihr_disabled=cell_slice.load_bool(),
            bounce=cell_slice.load_bool(),
            bounced=cell_slice.load_bool(),
            src=cell_slice.load_address(),
            dest=cell_slice.load_address(),
            value=CurrencyCollection.deserialize(cell_slice),
            ihr_fee=cell_slice.load_coins(),
            fwd_fee=cell_slice.load_coins(),
            created_lt=cell_slice.load_uint(64),
            created_at=cell_slice.load_uint(32)
        )


class ExternalMsgInfo(CommonMsgInfo):
    """
    ext_in_msg_info$10 src:MsgAddressExt dest:MsgAddressInt
    import_fee:Grams = CommonMsgInfo;
    """
    def __init__(self, src: typing.Optional[ExternalAddress], dest: Address, import_fee: int = 0):
        self.src = src
        self.dest = dest
        self.import_fee = import_fee

    def serialize(self) -> Cell:
        builder = Builder()
        builder.store_uint(2, 2)  # $10
        return builder\
            .store_address(self.src)\
            .store_address(self.dest)\
            .store_coins(self.import_fee)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        tag = cell_slice.load_uint(2)
        if tag != 2:
            raise SchemaMismatch(f'ExternalMsgInfo deserialization error unknown prefix tag: {tag}')
        return cls(
            src=cell_slice.load_address(),
            dest=cell_slice.load_address(),
            import_fee=cell_slice.load_coins()
        )


class ExternalOutMsgInfo(CommonMsgInfo):
    """
    ext_out_msg_info$11 src:MsgAddressInt dest:MsgAddressExt
    created_lt:uint64 created_at:uint32 = CommonMsgInfo;
    """
    def __init__(self, src: Address, dest: typing.Optional[ExternalAddress], created_lt: int = 0, created_at: int = 0):
        self.src = src
        self.dest = dest
        self.created_lt = created_lt
        self.created_at = created_at

    def serialize(self) -> Cell:
        builder = Builder()
        builder.store_uint(3, 2)  # $11
        return builder\
            .store_address(self.src)\
            .store_address(self.dest)\
            .store_uint(self.created_lt, 64)\
            .store_uint(self.created_at, 32)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        tag = cell_slice.load_uint(2)
        if tag != 3:
            raise SchemaMismatch(f'ExternalOutMsgInfo deserialization error unknown prefix tag: {tag}')
        return cls(
            src=cell_slice.load_address(),
            dest=cell_slice.load_address(),
            created_lt=cell_slice.load_uint(64),
            created_at=cell_slice.load_uint(32)
        )


class MessageAny(TlbScheme):
    """
    message$_ {X:Type} info:CommonMsgInfo
    init:(Maybe (Either StateInit ^StateInit))
    body:(Either X ^X) = Message X;

    init_layout and body_layout keep the way fields were stored, so parsed message serializes back to the same cell.
    """
    def __init__(self, info: typing.Union[InternalMsgInfo, ExternalMsgInfo, ExternalOutMsgInfo],
                 init: typing.Optional[StateInit] = None, body: typing.Optional[Cell] = None,
                 init_layout: EitherLayout = EitherLayout.native, body_layout: EitherLayout = EitherLayout.native):
        self.info = info
        self.init = init
        if body is None:
            body = Cell.empty()
        self.body = body
        self.init_layout = EitherLayout(init_layout)
        self.body_layout = EitherLayout(body_layout)

    def is_internal(self) -> bool:
        return isinstance(self.info, InternalMsgInfo)

    def serialize(self) -> Cell:
        builder = Builder().store_cell(self.info.serialize())
        if self.init is not None:
            builder.store_bit(1)  # maybe true
            init = self.init.serialize()
            body_in_ref = self.body_layout == EitherLayout.ref
            if self.body_layout == EitherLayout.native:
                body_in_ref = not fits_inline(builder, self.body, reserve_bits=len(init.bits) + 1,
                                              reserve_refs=len(init.refs))
            # inline init must leave a ref for the body
            store_either(builder, init, self.init_layout, reserve_refs=1 if body_in_ref else 0)
        else:
            builder.store_bit(0)  # maybe false
        return store_either(builder, self.body, self.body_layout).end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        info = CommonMsgInfo.deserialize(cell_slice)
        init = None
        init_layout = EitherLayout.native
        if cell_slice.load_bit():
            init, init_layout = load_either(cell_slice, StateInit.deserialize)
        body, body_layout = load_either(cell_slice, load_rest)
        return cls(info, init, body, init_layout, body_layout)

    def __eq__(self, other) -> bool:
        if not isinstance(other, MessageAny):
            return NotImplemented
        return self.info == other.info and self.init == other.init and self.body == other.body
