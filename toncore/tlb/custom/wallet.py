import typing

from ..tlb import TlbScheme, TlbError, SchemaMismatch
from ..block import CurrencyCollection
from ..transaction import MessageAny
from ...boc import Cell, Builder, Slice, HashMap


DEFAULT_WALLET_ID = 698983191
SIGNED_EXTERNAL_OP = 0x7369676e  # 'sign'
ACTION_SEND_MSG_TAG = 0x0ec3c86d
ACTION_SET_CODE_TAG = 0xad4de08e
ACTION_RESERVE_CURRENCY_TAG = 0x36e6b809
ACTION_CHANGE_LIBRARY_TAG = 0x26fa1dd4


class WalletV1V2Data(TlbScheme):
    """
    wallet_v1_data#_ seqno:uint32 public_key:bits256 = WalletV1V2Data;
    wallets v1r1 - v2r2 share this layout
    """
    def __init__(self,
                 seqno: int = 0,
                 public_key: typing.Optional[bytes] = None
                 ):
        self.seqno = seqno
        if public_key is None:
            raise TlbError('Public Key required for Wallet!')
        self.public_key = public_key

    def serialize(self) -> Cell:
        return Builder()\
            .store_uint(self.seqno, 32)\
            .store_bytes(self.public_key)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        return cls(seqno=cell_slice.load_uint(32), public_key=cell_slice.load_bytes(32))


class WalletV3Data(TlbScheme):
    """
    wallet_v3_data#_ seqno:uint32 wallet_id:uint32 public_key:bits256 = WalletV3Data;
    """
    def __init__(self,
                 seqno: typing.Optional[int] = 0,
                 wallet_id: typing.Optional[int] = None,
                 public_key: typing.Optional[bytes] = None
                 ):
        self.seqno = seqno
        if wallet_id is None:
            wallet_id = DEFAULT_WALLET_ID
        self.wallet_id = wallet_id
        if public_key is None:
            raise TlbError('Public Key required for Wallet!')
        self.public_key = public_key

    def serialize(self) -> Cell:
        builder = Builder()
        builder\
            .store_uint(self.seqno, 32)\
            .store_uint(self.wallet_id, 32)\
            .store_bytes(self.public_key)
        return builder.end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        return cls(seqno=cell_slice.load_uint(32), wallet_id=cell_slice.load_uint(32), public_key=cell_slice.load_bytes(32))


class WalletV4Data(TlbScheme):
    """
    wallet_v4_data#_ seqno:uint32 wallet_id:uint32 public_key:bits256 plugins:(Maybe ^Cell) = WalletV4Data;
    """
    def __init__(self,
                 seqno: typing.Optional[int] = 0,
                 wallet_id: typing.Optional[int] = None,
                 public_key: typing.Optional[bytes] = None,
                 plugins: typing.Optional[Cell] = None
                 ):
        self.seqno = seqno
        if wallet_id is None:
            wallet_id = DEFAULT_WALLET_ID
        self.wallet_id = wallet_id
        if public_key is None:
            raise TlbError('Public Key required for Wallet!')
        self.public_key = public_key
        self.plugins = plugins

    def serialize(self) -> Cell:
        builder = Builder()
        builder\
            .store_uint(self.seqno, 32)\
            .store_uint(self.wallet_id, 32)\
            .store_bytes(self.public_key)\
            .store_dict(self.plugins)
        return builder.end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        return cls(seqno=cell_slice.load_uint(32), wallet_id=cell_slice.load_uint(32),
                   public_key=cell_slice.load_bytes(32), plugins=cell_slice.load_maybe_ref())


class WalletV5R1Data(TlbScheme):
    """
    wallet_v5_data#_ is_signature_allowed:Bool seqno:uint32 wallet_id:uint32 public_key:bits256
    extensions:(Maybe ^Cell) = WalletV5R1Data;
    """
    def __init__(self,
                 is_signature_allowed: bool = True,
                 seqno: int = 0,
                 wallet_id: typing.Optional[int] = None,
                 public_key: typing.Optional[bytes] = None,
                 extensions: typing.Optional[Cell] = None
                 ):
        self.is_signature_allowed = is_signature_allowed
        self.seqno = seqno
        if wallet_id is None:
            raise TlbError('wallet_id required for Wallet V5!')
        self.wallet_id = wallet_id
        if public_key is None:
            raise TlbError('Public Key required for Wallet!')
        self.public_key = public_key
        self.extensions = extensions

    def serialize(self) -> Cell:
        return Builder()\
            .store_bool(self.is_signature_allowed)\
            .store_uint(self.seqno, 32)\
            .store_uint(self.wallet_id, 32)\
            .store_bytes(self.public_key)\
            .store_maybe_ref(self.extensions)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        return cls(is_signature_allowed=cell_slice.load_bool(), seqno=cell_slice.load_uint(32),
                   wallet_id=cell_slice.load_uint(32), public_key=cell_slice.load_bytes(32),
                   extensions=cell_slice.load_maybe_ref())


class HighloadWalletData(TlbScheme):
    """
    highload_wallet_data#_ wallet_id:uint32 last_cleaned:uint64 public_key:bits256 old_queries:(HashmapE 64 Cell) = HighloadWalletData;
    old_queries are kept as raw dict root.
    """
    def __init__(self,
                 wallet_id: typing.Optional[int] = None,
                 last_cleaned: int = 0,
                 public_key: typing.Optional[bytes] = None,
                 old_queries: typing.Optional[Cell] = None
                 ):
        if wallet_id is None:
            wallet_id = DEFAULT_WALLET_ID
        self.wallet_id = wallet_id
        if public_key is None:
            raise TlbError('Public Key required for Wallet!')
        self.last_cleaned = last_cleaned
        self.public_key = public_key
        self.old_queries = old_queries

    def serialize(self) -> Cell:
        builder = Builder()
        builder\
            .store_uint(self.wallet_id, 32) \
            .store_uint(self.last_cleaned, 64) \
            .store_bytes(self.public_key)\
            .store_dict(self.old_queries)
        return builder.end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        return cls(wallet_id=cell_slice.load_uint(32), last_cleaned=cell_slice.load_uint(64),
                   public_key=cell_slice.load_bytes(32), old_queries=cell_slice.load_maybe_ref())


class WalletMessage(TlbScheme):
    """
    wallet_message$_ send_mode:uint8 message:^MessageAny = WalletMessage;
    """

    def __init__(self, send_mode: int, message: MessageAny):
        self.send_mode = send_mode
        self.message = message

    def serialize(self) -> Cell:
        builder = Builder()
        builder.store_uint(self.send_mode, 8)
        builder.store_ref(self.message.serialize())
        return builder.end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        send_mode = cell_slice.load_uint(8)
        message = MessageAny.deserialize(cell_slice.load_ref().begin_parse())
        return cls(send_mode, message)

    def __eq__(self, other) -> bool:
        if not isinstance(other, WalletMessage):
            return NotImplemented
        return self.send_mode == other.send_mode and self.message == other.message


class WalletV3Body(TlbScheme):
    """
    External message body of wallets v3:
    signature:bits512 wallet_id:uint32 valid_until:uint32 seqno:uint32 messages:(WalletMessage ...)
    Without signature serializes to the cell which hash is signed.
    """

    def __init__(self, wallet_id: int, valid_until: int, seqno: int,
                 messages: typing.Optional[typing.List[WalletMessage]] = None,
                 signature: typing.Optional[bytes] = None):
        self.wallet_id = wallet_id
        self.valid_until = valid_until
        self.seqno = seqno
        self.messages = messages or []
        self.signature = signature

    def store_header(self, builder: Builder) -> Builder:
        return builder\
            .store_uint(self.wallet_id, 32)\
            .store_uint(self.valid_until, 32)\
            .store_uint(self.seqno, 32)

    @classmethod
    def load_header(cls, cell_slice: Slice) -> dict:
        return {
            'wallet_id': cell_slice.load_uint(32),
            'valid_until': cell_slice.load_uint(32),
            'seqno': cell_slice.load_uint(32),
        }

    def signing_cell(self) -> Cell:
        builder = self.store_header(Builder())
        for m in self.messages:
            builder.store_cell(m.serialize())
        return builder.end_cell()

    def serialize(self) -> Cell:
        signing_cell = self.signing_cell()
        if self.signature is None:
            return signing_cell
        return Builder()\
            .store_bytes(self.signature)\
            .store_cell(signing_cell)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice, signed: bool = True):
        signature = cell_slice.load_bytes(64) if signed else None
        fields = cls.load_header(cell_slice)
        messages = []
        while cell_slice.remaining_refs:
            messages.append(WalletMessage.deserialize(cell_slice))
        return cls(messages=messages, signature=signature, **fields)


class WalletV2Body(WalletV3Body):
    """
    External message body of wallets v2:
    signature:bits512 seqno:uint32 valid_until:uint32 messages:(WalletMessage ...)
    wallet_id is not stored and stays None
    """

    def __init__(self, wallet_id: typing.Optional[int] = None, valid_until: int = 0, seqno: int = 0,
                 messages: typing.Optional[typing.List[WalletMessage]] = None,
                 signature: typing.Optional[bytes] = None):
        super().__init__(wallet_id, valid_until, seqno, messages, signature)

    def store_header(self, builder: Builder) -> Builder:
        return builder\
            .store_uint(self.seqno, 32)\
            .store_uint(self.valid_until, 32)

    @classmethod
    def load_header(cls, cell_slice: Slice) -> dict:
        return {
            'seqno': cell_slice.load_uint(32),
            'valid_until': cell_slice.load_uint(32),
        }


class WalletV4Body(WalletV3Body):
    """
    External message body of wallets v4: same as v3 with op:uint8 = 0 (simple send) before messages
    """

    def __init__(self, wallet_id: int, valid_until: int, seqno: int,
                 messages: typing.Optional[typing.List[WalletMessage]] = None,
                 signature: typing.Optional[bytes] = None, op: int = 0):
        super().__init__(wallet_id, valid_until, seqno, messages, signature)
        self.op = op

    def store_header(self, builder: Builder) -> Builder:
        return super().store_header(builder).store_uint(self.op, 8)

    @classmethod
    def load_header(cls, cell_slice: Slice) -> dict:
        fields = super().load_header(cell_slice)
        fields['op'] = cell_slice.load_uint(8)
        if fields['op'] != 0:
            raise SchemaMismatch(f'WalletV4Body deserialization error: unsupported op {fields["op"]}')
        return fields


class OutAction(TlbScheme):
    """
    action_send_msg#0ec3c86d mode:(## 8) out_msg:^(MessageRelaxed Any) = OutAction;
    action_set_code#ad4de08e new_code:^Cell = OutAction;
    action_reserve_currency#36e6b809 mode:(## 8) currency:CurrencyCollection = OutAction;
    libref_hash$0 lib_hash:bits256 = LibRef;
    libref_ref$1 library:^Cell = LibRef;
    action_change_library#26fa1dd4 mode:(## 7) libref:LibRef = OutAction;
    """

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        tag = cell_slice.preload_uint(32)
        for action in (OutActionSendMsg, OutActionSetCode, OutActionReserveCurrency, OutActionChangeLibrary):
            if tag == action.tag:
                return action.deserialize(cell_slice)
        raise SchemaMismatch(f'OutAction deserialization error: unknown prefix tag {tag:#x}')

    @classmethod
    def load_tag(cls, cell_slice: Slice) -> None:
        tag = cell_slice.load_uint(32)
        if tag != cls.tag:
            raise SchemaMismatch(f'{cls.__name__} deserialization error: unknown prefix tag {tag:#x}')

    def __eq__(self, other) -> bool:
        if not isinstance(other, OutAction):
            return NotImplemented
        return self.serialize() == other.serialize()


class OutActionSendMsg(OutAction):
    """
    action_send_msg#0ec3c86d mode:(## 8) out_msg:^(MessageRelaxed Any) = OutAction;
    """
    tag = ACTION_SEND_MSG_TAG

    def __init__(self, mode: int, out_msg: MessageAny):
        self.mode = mode
        self.out_msg = out_msg

    def serialize(self) -> Cell:
        return Builder()\
            .store_uint(self.tag, 32)\
            .store_uint(self.mode, 8)\
            .store_ref(self.out_msg.serialize())\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        cls.load_tag(cell_slice)
        return cls(cell_slice.load_uint(8), MessageAny.deserialize(cell_slice.load_ref().begin_parse()))


class OutActionSetCode(OutAction):
    """
    action_set_code#ad4de08e new_code:^Cell = OutAction;
    """
    tag = ACTION_SET_CODE_TAG

    def __init__(self, new_code: Cell):
        self.new_code = new_code

    def serialize(self) -> Cell:
        return Builder()\
            .store_uint(self.tag, 32)\
            .store_ref(self.new_code)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        cls.load_tag(cell_slice)
        return cls(cell_slice.load_ref())


class OutActionReserveCurrency(OutAction):
    """
    action_reserve_currency#36e6b809 mode:(## 8) currency:CurrencyCollection = OutAction;
    """
    tag = ACTION_RESERVE_CURRENCY_TAG

    def __init__(self, mode: int, currency: typing.Union[CurrencyCollection, int]):
        if isinstance(currency, int):
            currency = CurrencyCollection(currency)
        self.mode = mode
        self.currency = currency

    def serialize(self) -> Cell:
        return Builder()\
            .store_uint(self.tag, 32)\
            .store_uint(self.mode, 8)\
            .store_cell(self.currency.serialize())\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        cls.load_tag(cell_slice)
        return cls(cell_slice.load_uint(8), CurrencyCollection.deserialize(cell_slice))


class OutActionChangeLibrary(OutAction):
    """
    action_change_library#26fa1dd4 mode:(## 7) libref:LibRef = OutAction;
    library is a library cell hash (libref_hash$0) or the library cell itself (libref_ref$1)
    """
    tag = ACTION_CHANGE_LIBRARY_TAG

    def __init__(self, mode: int, library: typing.Union[bytes, Cell]):
        self.mode = mode
        self.library = library

    def serialize(self) -> Cell:
        builder = Builder()\
            .store_uint(self.tag, 32)\
            .store_uint(self.mode, 7)
        if isinstance(self.library, Cell):
            builder.store_bit(1).store_ref(self.library)
        else:
            builder.store_bit(0).store_bytes(self.library)
        return builder.end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        cls.load_tag(cell_slice)
        mode = cell_slice.load_uint(7)
        if cell_slice.load_bit():
            return cls(mode, cell_slice.load_ref())
        return cls(mode, cell_slice.load_bytes(32))


class OutList(TlbScheme):
    """
    out_list_empty$_ = OutList 0;
    out_list$_ {n:#} prev:^(OutList n) action:OutAction = OutList (n + 1);
    """

    def __init__(self, actions: typing.Optional[typing.List[OutAction]] = None):
        self.actions = actions or []

    def serialize(self) -> Cell:
        cell = Cell.empty()
        for action in self.actions:
            cell = Builder()\
                .store_ref(cell)\
                .store_cell(action.serialize())\
                .end_cell()
        return cell

    @classmethod
    def deserialize(cls, cell_slice: Slice):
        actions = []
        while cell_slice.remaining_bits:
            prev = cell_slice.load_ref()
            actions.append(OutAction.deserialize(cell_slice))
            cell_slice = prev.begin_parse()
        actions.reverse()
        return cls(actions)


class WalletV5Body(TlbScheme):
    """
    External message body of wallet v5r1:
    signed_request$_ op:#7369676e wallet_id:uint32 valid_until:uint32 seqno:uint32
    out_actions:(Maybe ^OutList) has_other_actions:(## 1) = SignedRequest;
    the signature goes after the request.
    """

    def __init__(self, wallet_id: int, valid_until: int, seqno: int,
                 messages: typing.Optional[typing.List[WalletMessage]] = None,
                 signature: typing.Optional[bytes] = None):
        self.wallet_id = wallet_id
        self.valid_until = valid_until
        self.seqno = seqno
        self.messages = messages or []
        self.signature = signature

    def signing_cell(self) -> Cell:
        out_list = None
        if self.messages:
            out_list = OutList([OutActionSendMsg(m.send_mode, m.message) for m in self.messages]).serialize()
        return Builder()\
            .store_uint(SIGNED_EXTERNAL_OP, 32)\
            .store_uint(self.wallet_id, 32)\
            .store_uint(self.valid_until, 32)\
            .store_uint(self.seqno, 32)\
            .store_maybe_ref(out_list)\
            .store_bit(0)\
            .end_cell()

    def serialize(self) -> Cell:
        signing_cell = self.signing_cell()
        if self.signature is None:
            return signing_cell
        return Builder()\
            .store_cell(signing_cell)\
            .store_bytes(self.signature)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice, signed: bool = True):
        op = cell_slice.load_uint(32)
        if op != SIGNED_EXTERNAL_OP:
            raise SchemaMismatch(f'WalletV5Body deserialization error: unknown prefix tag {op:#x}')
        wallet_id = cell_slice.load_uint(32)
        valid_until = cell_slice.load_uint(32)
        seqno = cell_slice.load_uint(32)
        out_list = cell_slice.load_maybe_ref()
        if cell_slice.load_bit():
            raise SchemaMismatch('WalletV5Body deserialization error: extended actions are not supported')
        signature = cell_slice.load_bytes(64) if signed else None
        messages = []
        if out_list is not None:
            for action in OutList.deserialize(out_list.begin_parse()).actions:
                if not isinstance(action, OutActionSendMsg):
                    raise SchemaMismatch(f'WalletV5Body deserialization error: unexpected action {action!r}')
                messages.append(WalletMessage(action.mode, action.out_msg))
        return cls(wallet_id, valid_until, seqno, messages, signature)


class HighloadWalletBody(TlbScheme):
    """
    External message body of highload wallet v2:
    signature:bits512 wallet_id:uint32 query_id:uint64 messages:(HashmapE 16 WalletMessage)
    """

    def __init__(self, wallet_id: int, query_id: int,
                 messages: typing.Optional[typing.List[WalletMessage]] = None,
                 signature: typing.Optional[bytes] = None):
        self.wallet_id = wallet_id
        self.query_id = query_id
        self.messages = messages or []
        self.signature = signature

    @staticmethod
    def messages_serializer(src: WalletMessage, dest: Builder) -> None:
        dest.store_cell(src.serialize())

    def signing_cell(self) -> Cell:
        messages = HashMap(16, value_serializer=self.messages_serializer)
        for i, m in enumerate(self.messages):
            messages.set_int_key(i, m)
        return Builder()\
            .store_uint(self.wallet_id, 32)\
            .store_uint(self.query_id, 64)\
            .store_dict(messages.serialize())\
            .end_cell()

    def serialize(self) -> Cell:
        signing_cell = self.signing_cell()
        if self.signature is None:
            return signing_cell
        return Builder()\
            .store_bytes(self.signature)\
            .store_cell(signing_cell)\
            .end_cell()

    @classmethod
    def deserialize(cls, cell_slice: Slice, signed: bool = True):
        signature = cell_slice.load_bytes(64) if signed else None
        wallet_id = cell_slice.load_uint(32)
        query_id = cell_slice.load_uint(64)
        messages = cell_slice.load_dict(16, value_deserializer=WalletMessage.deserialize) or {}
        return cls(wallet_id, query_id, [messages[k] for k in sorted(messages)], signature)
