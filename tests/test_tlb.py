import pytest

from toncore.boc import Cell, begin_cell
from toncore.boc.address import Address, ExternalAddress
from toncore.boc.exceptions import UnexpectedData
from toncore.tlb import StateInit, TickTock, CurrencyCollection, ExtraCurrencyCollection, InternalMsgInfo, \
    ExternalMsgInfo, ExternalOutMsgInfo, CommonMsgInfo, MessageAny, EitherLayout, SchemaMismatch, load_either, \
    store_either


DEST = Address('EQDk2VTvn04SUKJrW7rXahzdF8_Qi6utb0wj43InCu9vdjrR')


def test_state_init():
    code = begin_cell().store_uint(0xFF00, 16).end_cell()
    data = begin_cell().store_uint(0, 32).end_cell()
    state_init = StateInit(code=code, data=data)
    cell = state_init.serialize()
    assert cell.bits.to01() == '00110'
    assert StateInit.deserialize(cell.begin_parse()) == state_init
    assert state_init.address() == Address((0, cell.hash))
    assert state_init.address(-1).wc == -1

    special = StateInit(split_depth=5, special=TickTock(True, False), library=code)
    restored = StateInit.from_cell(special.serialize(), strict=True)
    assert restored.split_depth == 5
    assert restored.special == TickTock(True, False)
    assert restored.code is None and restored.library == code


def test_strict_from_cell():
    cell = begin_cell().store_bits('00000').store_uint(1, 8).end_cell()
    assert StateInit.from_cell(cell) == StateInit()
    with pytest.raises(UnexpectedData):
        StateInit.from_cell(cell, strict=True)


def test_currency_collection():
    value = CurrencyCollection(10 ** 9, ExtraCurrencyCollection({1: 100, 239: 10 ** 30}))
    restored = CurrencyCollection.from_cell(value.serialize(), strict=True)
    assert restored == value
    assert restored.other.dict == {1: 100, 239: 10 ** 30}

    empty = CurrencyCollection(5)
    assert empty.serialize() == begin_cell().store_coins(5).store_bit(0).end_cell()
    assert CurrencyCollection.from_cell(empty.serialize()).other.dict == {}


def test_msg_info():
    internal = InternalMsgInfo(src=None, dest=DEST, value=15, created_lt=10, created_at=1700000000)
    restored = CommonMsgInfo.deserialize(internal.serialize().begin_parse())
    assert isinstance(restored, InternalMsgInfo)
    assert restored == internal
    assert restored.value_coins == 15 and restored.dest == DEST and restored.bounce

    external = ExternalMsgInfo(src=None, dest=DEST, import_fee=3)
    restored = CommonMsgInfo.deserialize(external.serialize().begin_parse())
    assert isinstance(restored, ExternalMsgInfo) and restored == external

    out = ExternalOutMsgInfo(src=DEST, dest=ExternalAddress(7, 3), created_lt=1)
    restored = CommonMsgInfo.deserialize(out.serialize().begin_parse())
    assert isinstance(restored, ExternalOutMsgInfo) and restored == out


def test_wrong_tag():
    with pytest.raises(SchemaMismatch):
        ExternalMsgInfo.deserialize(begin_cell().store_uint(3, 2).end_cell().begin_parse())
    with pytest.raises(SchemaMismatch):
        ExternalOutMsgInfo.deserialize(begin_cell().store_uint(2, 2).end_cell().begin_parse())
    with pytest.raises(SchemaMismatch):
        InternalMsgInfo.deserialize(begin_cell().store_bit(1).end_cell().begin_parse())


def test_message_layouts():
    body = begin_cell().store_uint(0, 32).store_string('hello').end_cell()
    info = InternalMsgInfo(dest=DEST, value=1)

    inline = MessageAny(info, body=body, body_layout=EitherLayout.inline).serialize()
    ref = MessageAny(info, body=body, body_layout=EitherLayout.ref).serialize()
    assert inline != ref
    assert len(ref.refs) == 1

    from_inline = MessageAny.deserialize(inline.begin_parse())
    from_ref = MessageAny.deserialize(ref.begin_parse())
    assert from_inline == from_ref
    assert from_inline.body == body
    assert from_inline.body_layout == EitherLayout.inline
    assert from_ref.body_layout == EitherLayout.ref
    # parsed messages serialize back to the same cells
    assert from_inline.serialize() == inline
    assert from_ref.serialize() == ref

    assert MessageAny(info, body=body).serialize() == inline


def test_native_layout_uses_ref_for_big_body():
    body = begin_cell().store_bits('1' * 1000).end_cell()
    message = MessageAny(InternalMsgInfo(dest=DEST), body=body)
    cell = message.serialize()
    assert cell.refs == (body,)
    assert MessageAny.deserialize(cell.begin_parse()).body_layout == EitherLayout.ref


def test_message_with_init():
    state_init = StateInit(code=Cell.empty(), data=begin_cell().store_uint(1, 8).end_cell())
    body = begin_cell().store_uint(5, 32).end_cell()
    message = MessageAny(ExternalMsgInfo(None, state_init.address()), init=state_init, body=body)
    cell = message.serialize()

    restored = MessageAny.from_cell(cell, strict=True)
    assert not restored.is_internal()
    assert restored.init == state_init
    assert restored.init_layout == EitherLayout.inline
    assert restored.body == body
    assert restored == message

    as_ref = MessageAny(message.info, init=state_init, body=body, init_layout=EitherLayout.ref).serialize()
    restored = MessageAny.deserialize(as_ref.begin_parse())
    assert restored.init_layout == EitherLayout.ref
    assert restored == message


def test_empty_body():
    message = MessageAny(InternalMsgInfo(dest=DEST))
    cell = message.serialize()
    restored = MessageAny.deserialize(cell.begin_parse())
    assert restored.body == Cell.empty()
    assert restored.is_internal()


def test_either_helpers():
    value = begin_cell().store_uint(9, 4).end_cell()
    builder = begin_cell().store_bits('1' * 1018)
    # 1 Either bit and 4 value bits do not fit into 5 free bits with reserve
    store_either(builder, value, reserve_bits=1)
    cs = builder.end_cell().begin_parse()
    cs.skip_bits(1018)
    loaded, layout = load_either(cs, lambda s: s.load_uint(4))
    assert loaded == 9 and layout == EitherLayout.ref

    cs = store_either(begin_cell(), value).end_cell().begin_parse()
    assert load_either(cs, lambda s: s.load_uint(4)) == (9, EitherLayout.inline)


def test_native_init_layout_ignores_body_size():
    info = ExternalMsgInfo(None, DEST)
    state_init = StateInit(code=Cell.empty(), data=Cell.empty())
    body = begin_cell().store_bits('1' * 800).end_cell()
    cell = MessageAny(info, init=state_init, body=body).serialize()

    restored = MessageAny.deserialize(cell.begin_parse())
    assert restored.init_layout == EitherLayout.inline
    assert restored.body_layout == EitherLayout.ref

    expected = begin_cell()\
        .store_cell(info.serialize())\
        .store_bits('10')\
        .store_cell(state_init.serialize())\
        .store_bit(1)\
        .store_ref(body)\
        .end_cell()
    assert cell.hash == expected.hash


def test_native_init_layout_leaves_ref_for_body():
    info = InternalMsgInfo(dest=DEST, value=CurrencyCollection(1, ExtraCurrencyCollection({1: 100})))
    body = begin_cell().store_uint(3, 32).store_ref(Cell.empty()).end_cell()
    library = begin_cell().store_uint(2, 8).end_cell()

    # info, init and body refs fill the cell exactly
    state_init = StateInit(data=Cell.empty(), library=library)
    message = MessageAny(info, init=state_init, body=body)
    cell = message.serialize()
    assert len(cell.refs) == 4
    restored = MessageAny.deserialize(cell.begin_parse())
    assert restored.init_layout == EitherLayout.inline
    assert restored.body_layout == EitherLayout.inline
    assert restored == message

    # inline init would take the last ref, so it goes to a ref itself
    state_init = StateInit(code=begin_cell().store_uint(1, 8).end_cell(), data=Cell.empty(), library=library)
    message = MessageAny(info, init=state_init, body=body)
    cell = message.serialize()
    assert len(cell.refs) == 3
    restored = MessageAny.deserialize(cell.begin_parse())
    assert restored.init_layout == EitherLayout.ref
    assert restored.body_layout == EitherLayout.inline
    assert restored == message

    big_body = begin_cell().store_bits('1' * 900).store_ref(Cell.empty()).end_cell()
    message = MessageAny(info, init=state_init, body=big_body)
    restored = MessageAny.deserialize(message.serialize().begin_parse())
    assert restored.init_layout == EitherLayout.ref
    assert restored.body_layout == EitherLayout.ref
    assert restored == message


def test_common_msg_info_is_abstract():
    with pytest.raises(TypeError):
        CommonMsgInfo()
