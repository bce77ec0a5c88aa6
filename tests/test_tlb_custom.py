import pytest

from toncore.boc import Cell, begin_cell
from toncore.boc.address import Address
from toncore.tlb import CurrencyCollection, ExtraCurrencyCollection, InternalMsgInfo, MessageAny, EitherLayout, \
    SchemaMismatch, TlbError, OutAction, OutActionSendMsg, OutActionSetCode, OutActionReserveCurrency, \
    OutActionChangeLibrary, OutList, WalletV5Body, JettonTransfer, NftTransfer


OUT_LIST = 'b5ee9c72010104010084000181bc04889cb28b36a3a00810e363a413763ec34860bf0fce552c5d36e37289fafd442f1983d740f9' \
           '2378919d969dd530aec92d258a0779fb371d4659f10ca1b3826001020a0ec3c86d0302030000006642007847b4630eb08d9f48' \
           '6fe846d5496878556dfd5a084f82a9a3fb01224e67c84c187a120000000000000000000000000000'

JETTON_TRANSFER = 'b5ee9c720101020100a800016d0f8a7ea5001f5512dab844d643b9aca00800ef3b9902a271b2a01c8938a523cfe24e718' \
                  '47aaeb6a620001ed44a77ac0e709c1033428f030100d7259385618009dd924373a9aad41b28cec02da9384d67363af2034' \
                  'fc2a7ccc067e28d4110de86e66deb002365dfa32dfd419308ebdf35e0f6ba7c42534bbb5dab5e89e28ea3e0455cc2d2f00' \
                  '257a672371a90e149b7d25864dbfd44827cc1e8a30df1b1e0c4338502ade2ad96'
JETTON_PAYLOAD = '259385618009DD924373A9AAD41B28CEC02DA9384D67363AF2034FC2A7CCC067E28D4110DE86E66DEB002365DFA32DFD4' \
                 '19308EBDF35E0F6BA7C42534BBB5DAB5E89E28EA3E0455CC2D2F00257A672371A90E149B7D25864DBFD44827CC1E8A30DF1B' \
                 '1E0C4338502ADE2AD94'

NFT_TRANSFER = 'b5ee9c7201010101006f0000d95fcc3d140000000000000000800e20aaf07ad251d1800fe45e3af334769b7b2069d3ab2ea6' \
               'c9ee0f73dfd072a21000a1b4b24b6a66313f3e0b49d095f3e8f4294af504b3a0f7b99290129f3aaafcc47312d0040544f4e' \
               '506c616e65747320676966742077697468206c6f76658'

DEST = Address('EQDk2VTvn04SUKJrW7rXahzdF8_Qi6utb0wj43InCu9vdjrR')


def hex_bits(value: str, length: int) -> str:
    return bin(int(value, 16))[2:].zfill(len(value) * 4)[:length]


def test_out_list_from_wallet_v5_request():
    out_list = Cell.one_from_boc(OUT_LIST).begin_parse().load_maybe_ref()
    parsed = OutList.from_cell(out_list, strict=True)
    assert len(parsed.actions) == 1
    action = parsed.actions[0]
    assert isinstance(action, OutActionSendMsg)
    assert action.mode == 3
    assert action.out_msg.info.value_coins == 1000000
    assert out_list.refs[0] == Cell.empty()
    assert parsed.serialize() == out_list

    assert OutList().serialize() == Cell.empty()
    assert OutList.from_cell(Cell.empty()).actions == []


def test_out_actions():
    library = begin_cell().store_uint(7, 8).end_cell()
    message = MessageAny(InternalMsgInfo(dest=DEST, value=5))
    actions = [
        OutActionSendMsg(1, message),
        OutActionSetCode(begin_cell().store_uint(1, 8).end_cell()),
        OutActionReserveCurrency(2, CurrencyCollection(10 ** 9, ExtraCurrencyCollection({1: 100}))),
        OutActionChangeLibrary(1, library.hash),
        OutActionChangeLibrary(2, library),
    ]
    out_list = OutList(actions).serialize()

    # the last action is stored in the root
    cs = out_list.begin_parse()
    prev = cs.load_ref()
    assert cs.load_uint(32) == 0x26fa1dd4
    assert cs.load_uint(7) == 2 and cs.load_bit() == 1 and cs.load_ref() == library
    assert prev.begin_parse().preload_uint(32) == 0x26fa1dd4

    restored = OutList.from_cell(out_list, strict=True)
    assert restored.actions == actions
    assert [type(a) for a in restored.actions] == [type(a) for a in actions]
    assert restored.actions[2].currency.other == ExtraCurrencyCollection({1: 100})
    assert restored.actions[3].library == library.hash
    assert restored.serialize() == out_list

    assert OutActionSetCode(library).serialize().bits.to01() == hex_bits('ad4de08e', 32)
    assert OutActionReserveCurrency(0, 1).currency == CurrencyCollection(1)

    with pytest.raises(SchemaMismatch):
        OutAction.from_cell(begin_cell().store_uint(0xdeadbeef, 32).end_cell())
    with pytest.raises(SchemaMismatch):
        OutActionSetCode.from_cell(OutActionReserveCurrency(0, 1).serialize())


def test_v5_body_with_other_actions():
    body = begin_cell()\
        .store_uint(0x7369676e, 32)\
        .store_uint(1, 32)\
        .store_uint(2, 32)\
        .store_uint(3, 32)\
        .store_maybe_ref(OutList([OutActionSetCode(Cell.empty())]).serialize())\
        .store_bit(0)\
        .end_cell()
    with pytest.raises(SchemaMismatch):
        WalletV5Body.deserialize(body.begin_parse(), signed=False)


def test_jetton_transfer():
    cell = Cell.one_from_boc(JETTON_TRANSFER)
    payload = begin_cell().store_bits(hex_bits(JETTON_PAYLOAD, 862)).end_cell()

    transfer = JettonTransfer.from_cell(cell, strict=True)
    assert transfer.query_id == 8819263745311958
    assert transfer.amount == 10 ** 9
    assert transfer.destination == Address('EQB3ncyBUTjZUA5EnFKR5_EnOMI9V1tTEAAPaiU71gc4TiUt')
    assert transfer.response_destination is None
    assert transfer.custom_payload is None
    assert transfer.forward_ton_amount == 215000000
    assert transfer.forward_payload == payload
    assert transfer.forward_payload_layout == EitherLayout.ref
    assert transfer.serialize().to_boc().hex() == JETTON_TRANSFER

    built = JettonTransfer(query_id=8819263745311958, amount=10 ** 9,
                           destination='EQB3ncyBUTjZUA5EnFKR5_EnOMI9V1tTEAAPaiU71gc4TiUt',
                           forward_ton_amount=215000000, forward_payload=payload)
    assert built.serialize().to_boc().hex() == JETTON_TRANSFER
    assert built == transfer

    small = JettonTransfer(amount=1, destination=DEST, forward_ton_amount=1,
                           forward_payload=begin_cell().store_uint(0, 32).end_cell())
    assert JettonTransfer.from_cell(small.serialize()).forward_payload_layout == EitherLayout.inline
    assert len(small.serialize().refs) == 0

    with pytest.raises(TlbError):
        JettonTransfer(amount=1, destination=DEST, forward_payload=payload).serialize()
    JettonTransfer(amount=1, destination=DEST).serialize()

    with pytest.raises(SchemaMismatch):
        JettonTransfer.from_cell(Cell.one_from_boc(NFT_TRANSFER))


def test_nft_transfer():
    cell = Cell.one_from_boc(NFT_TRANSFER)
    payload = begin_cell().store_bits(hex_bits('40544F4E506C616E65747320676966742077697468206C6F7665', 208)).end_cell()

    transfer = NftTransfer.from_cell(cell, strict=True)
    assert transfer.query_id == 0
    assert transfer.new_owner == Address('0:71055783d6928e8c007f22f1d799a3b4dbd9034e9d5975364f707b9efe839510')
    assert transfer.response_destination == \
        Address('0:286d2c92da998c4fcf82d274257cfa3d0a52bd412ce83dee64a404a7ceaabf31')
    assert transfer.custom_payload is None
    assert transfer.forward_amount == 10000000
    assert transfer.forward_payload == payload
    assert transfer.forward_payload_layout == EitherLayout.inline
    assert transfer.serialize().to_boc().hex() == NFT_TRANSFER

    built = NftTransfer(new_owner='0:71055783d6928e8c007f22f1d799a3b4dbd9034e9d5975364f707b9efe839510',
                        response_destination='0:286d2c92da998c4fcf82d274257cfa3d0a52bd412ce83dee64a404a7ceaabf31',
                        forward_amount=10000000, forward_payload=payload)
    assert built.serialize() == cell

    in_ref = NftTransfer(new_owner=DEST, forward_payload=payload, forward_payload_layout=EitherLayout.ref)
    restored = NftTransfer.from_cell(in_ref.serialize(), strict=True)
    assert restored.forward_payload == payload
    assert restored.forward_payload_layout == EitherLayout.ref
    assert restored.custom_payload is None
