import typing

from .wallet import Wallet, WalletError, logger
from ..utils import generate_query_id
from ...crypto.keys import private_key_to_public_key
from ...crypto.signature import sign_message
from ...boc import Cell
from ...tlb.custom.wallet import HighloadWalletData, WalletMessage, HighloadWalletBody, DEFAULT_WALLET_ID
from ...tlb.transaction import MessageAny

HIGHLOAD_WALLET_CODE = Cell.one_from_boc(
    b'\xb5\xee\x9cr\x01\x01\t\x01\x00\xe5\x00\x01\x14\xff\x00\xf4\xa4\x13\xf4\xbc\xf2\xc8\x0b\x01\x02\x01 \x02\x03\x02\x01H\x04\x05\x01\xea\xf2\x83\x08\xd7\x18 \xd3\x1f\xd3?\xf8#\xaa\x1fS \xb9\xf2c\xedD\xd0\xd3\x1f\xd3?\xd3\xff\xf4\x04\xd1S`\x80@\xf4\x0eo\xa11\xf2`Qs\xba\xf2\xa2\x07\xf9\x01T\x10\x87\xf9\x10\xf2\xa3\x02\xf4\x04\xd1\xf8\x00\x7f\x8e\x16!\x80\x10\xf4xo\xa5 \x98\x02\xd3\x07\xd40\x01\xfb\x00\x912\xe2\x01\xb3\xe6[\x83%\xa1\xc8@4\x80@\xf4C\x8a\xe61\x01\xc8\xcb\x1f\x13\xcb?\xcb\xff\xf4\x00\xc9\xedT\x08\x00\x04\xd00\x02\x01 \x06\x07\x00\x17\xbd\x9c\xe7j&\x86\x9a\xf9\x8e\xb8_\xfc\x00A\xbe_\x97j&\x86\x98\xf9\x8e\x99\xfe\x9f\xf9\x8f\xa0&\x8a\x91\x04\x02\x07\xa0s}\t\x8c\x92\xdb\xfc\x95\xdd\x1f\x14\x004 \x80@\xf4\x96o\xa5l\x12 \x940S\x03\xb9\xde \x9336\x01\x92l!\xe2\xb3')


class HighloadWallet(Wallet):
    """
    Highload wallet v2: messages are kept in HashmapE 16 and replay protection uses query_id instead of seqno
    """
    max_messages = 254
    default_offset = 7200

    @classmethod
    def from_data(cls, public_key: bytes, wc: int = 0, wallet_id: typing.Optional[int] = None,
                  **kwargs) -> "HighloadWallet":
        data = cls.create_data_cell(public_key, wallet_id, wc)
        return cls.from_code_and_data(wc, HIGHLOAD_WALLET_CODE, data, **kwargs)

    @staticmethod
    def create_data_cell(public_key: bytes, wallet_id: typing.Optional[int] = None, wc: typing.Optional[int] = 0,
                         old_queries: typing.Optional[Cell] = None) -> Cell:
        if wallet_id is None:
            wallet_id = DEFAULT_WALLET_ID + wc
        return HighloadWalletData(wallet_id=wallet_id, public_key=public_key, last_cleaned=0,
                                  old_queries=old_queries).serialize()

    @classmethod
    def from_private_key(cls, private_key: bytes, wc: int = 0,
                         wallet_id: typing.Optional[int] = None) -> "HighloadWallet":
        public_key = private_key_to_public_key(private_key)
        return cls.from_data(public_key=public_key, wc=wc, wallet_id=wallet_id, private_key=private_key)

    @classmethod
    def raw_create_transfer_msg(cls, private_key: bytes, wallet_id: int, messages: typing.List[WalletMessage],
                                query_id: int = 0, offset: typing.Optional[int] = None) -> Cell:
        cls.check_messages(messages)
        if not query_id:
            query_id = generate_query_id(cls.default_offset if offset is None else offset)
        body = HighloadWalletBody(wallet_id=wallet_id, query_id=query_id, messages=messages)
        body.signature = sign_message(body.signing_cell().hash, private_key)
        logger.debug(f'{cls.__name__} transfer body: query_id={query_id}, {len(messages)} messages')
        return body.serialize()

    def raw_transfer(self, msgs: typing.List[WalletMessage], query_id: int = 0,
                     offset: typing.Optional[int] = None, include_init: bool = False) -> MessageAny:
        """
        :param query_id: query id
        :param offset: if query id is 0 it will be generated as current_time + offset
        :param msgs: list of WalletMessages. to create one call create_wallet_internal_message meth
        """
        private_key = self.check_private_key()
        body = self.raw_create_transfer_msg(private_key=private_key, wallet_id=self.wallet_id,
                                            query_id=query_id, offset=offset, messages=msgs)
        return self.create_external(body=body, include_init=include_init)

    def transfer_many(self, destinations: typing.List[typing.Any], amounts: typing.List[int],
                      bodies: typing.Optional[typing.List[typing.Optional[Cell]]] = None,
                      **kwargs) -> MessageAny:
        if len(destinations) != len(amounts) or (bodies is not None and len(bodies) != len(destinations)):
            raise WalletError('destinations, amounts and bodies must have the same length')
        result_msgs = []
        for i, destination in enumerate(destinations):
            body = bodies[i] if bodies is not None else None
            result_msgs.append(self.create_wallet_internal_message(destination=destination, value=amounts[i],
                                                                   body=body))
        return self.raw_transfer(msgs=result_msgs, **kwargs)

    def create_init_external(self) -> MessageAny:
        return self.raw_transfer(msgs=[], include_init=True)

    def _data(self) -> HighloadWalletData:
        return HighloadWalletData.deserialize(self.state_init.data.begin_parse())

    @property
    def wallet_id(self) -> int:
        """
        :return: wallet_id taken from contract data
        """
        return self._data().wallet_id

    @property
    def last_cleaned(self) -> int:
        return self._data().last_cleaned

    @property
    def public_key(self) -> bytes:
        return self._data().public_key

    @property
    def old_queries(self) -> typing.Optional[Cell]:
        return self._data().old_queries
