import logging
import typing

from ..contract import Contract, ContractError
from ..utils import generate_valid_until
from ...crypto.keys import private_key_to_public_key, mnemonic_to_private_key, mnemonic_new
from ...crypto.signature import sign_message
from ...boc import Cell, Builder
from ...boc.address import Address
from ...tlb.account import StateInit
from ...tlb.transaction import MessageAny
from ...tlb.custom.wallet import WalletV1V2Data, WalletV3Data, WalletV4Data, WalletMessage, WalletV2Body, \
    WalletV3Body, WalletV4Body, DEFAULT_WALLET_ID

logger = logging.getLogger('toncore.wallet')

WALLET_V3_R2_CODE = Cell.one_from_boc(
    b'\xb5\xee\x9crA\x01\x01\x01\x00q\x00\x00\xde\xff\x00 \xdd \x82\x01L\x97\xba!\x82\x013\x9c\xba\xb1\x9fq\xb0\xedD\xd0\xd3\x1f\xd3\x1f1\xd7\x0b\xff\xe3\x04\xe0\xa4\xf2`\x83\x08\xd7\x18 \xd3\x1f\xd3\x1f\xd3\x1f\xf8#\x13\xbb\xf2c\xedD\xd0\xd3\x1f\xd3\x1f\xd3\xff\xd1Q2\xba\xf2\xa1QD\xba\xf2\xa2\x04\xf9\x01T\x10U\xf9\x10\xf2\xa3\xf8\x00\x93 \xd7J\x96\xd3\x07\xd4\x02\xfb\x00\xe8\xd1\x01\xa4\xc8\xcb\x1f\xcb\x1f\xcb\xff\xc9\xedT\x10\xbdm\xad')
WALLET_V3_R1_CODE = Cell.one_from_boc(
    b'\xb5\xee\x9crA\x01\x01\x01\x00b\x00\x00\xc0\xff\x00 \xdd \x82\x01L\x97\xba\x970\xedD\xd0\xd7\x0b\x1f\xe0\xa4\xf2`\x83\x08\xd7\x18 \xd3\x1f\xd3\x1f\xd3\x1f\xf8#\x13\xbb\xf2c\xedD\xd0\xd3\x1f\xd3\x1f\xd3\xff\xd1Q2\xba\xf2\xa1QD\xba\xf2\xa2\x04\xf9\x01T\x10U\xf9\x10\xf2\xa3\xf8\x00\x93 \xd7J\x96\xd3\x07\xd4\x02\xfb\x00\xe8\xd1\x01\xa4\xc8\xcb\x1f\xcb\x1f\xcb\xff\xc9\xedT?\xben\xe0')
WALLET_V4_R2_CODE = Cell.one_from_boc(
    b'\xb5\xee\x9crA\x02\x14\x01\x00\x02\xd4\x00\x01\x14\xff\x00\xf4\xa4\x13\xf4\xbc\xf2\xc8\x0b\x01\x02\x01 \x02\x03\x02\x01H\x04\x05\x04\xf8\xf2\x83\x08\xd7\x18 \xd3\x1f\xd3\x1f\xd3\x1f\x02\xf8#\xbb\xf2d\xedD\xd0\xd3\x1f\xd3\x1f\xd3\xff\xf4\x04\xd1QC\xba\xf2\xa1QQ\xba\xf2\xa2\x05\xf9\x01T\x10d\xf9\x10\xf2\xa3\xf8\x00$\xa4\xc8\xcb\x1fR@\xcb\x1fR0\xcb\xffR\x10\xf4\x00\xc9\xedT\xf8\x0f\x01\xd3\x07!\xc0\x00\x9flQ\x93 \xd7J\x96\xd3\x07\xd4\x02\xfb\x00\xe80\xe0!\xc0\x01\xe3\x00!\xc0\x02\xe3\x00\x01\xc0\x03\x910\xe3\r\x03\xa4\xc8\xcb\x1f\x12\xcb\x1f\xcb\xff\x10\x11\x12\x13\x02\xe6\xd0\x01\xd0\xd3\x03!q\xb0\x92_\x04\xe0"\xd7I\xc1 \x92_\x04\xe0\x02\xd3\x1f!\x82\x10plug\xbd"\x82\x10dstr\xbd\xb0\x92_\x05\xe0\x03\xfa@0 \xfaD\x01\xc8\xca\x07\xcb\xff\xc9\xd0\xedD\xd0\x81\x01@\xd7!\xf4\x040\\\x81\x01\x08\xf4\no\xa11\xb3\x92_\x07\xe0\x05\xd3?\xc8%\x82\x10plug\xba\x9280\xe3\r\x03\x82\x10dstr\xba\x92_\x06\xe3\r\x06\x07\x02\x01 \x08\t\x00x\x01\xfa\x00\xf4\x040\xf8\'o"0P\n\xa1!\xbe\xf2\xe0P\x82\x10plug\x83\x1e\xb1p\x80\x18P\x04\xcb\x05&\xcf\x16X\xfa\x02\x19\xf4\x00\xcbi\x17\xcb\x1fR`\xcb? \xc9\x80@\xfb\x00\x06\x00\x8aP\x04\x81\x01\x08\xf4Y0\xedD\xd0\x81\x01@\xd7 \xc8\x01\xcf\x16\xf4\x00\xc9\xedT\x01r\xb0\x8e#\x82\x10dstr\x83\x1e\xb1p\x80\x18P\x05\xcb\x05P\x03\xcf\x16#\xfa\x02\x13\xcbj\xcb\x1f\xcb?\xc9\x80@\xfb\x00\x92_\x03\xe2\x02\x01 \n\x0b\x00Y\xbd$+oj&\x84\x08\n\x06\xb9\x0f\xa0!\x84p\xd4\x08\x08G\xa4\x93})\x91\x0c\xe6\x90>\x9f\xf9\x83x\x12\x80\x1bx\x10\x14\x89\x87\x15\x9f1\x84\x02\x01X\x0c\r\x00\x11\xb8\xc9~\xd4M\rp\xb1\xf8\x00=\xb2\x9d\xfbQ4 @P5\xc8}\x01\x0c\x00\xb22\x81\xf2\xff\xf2t\x00`@B=\x02\x9b\xe8L`\x02\x01 \x0e\x0f\x00\x19\xad\xcev\xa2h@ k\x90\xeb\x85\xff\xc0\x00\x19\xaf\x1d\xf6\xa2h@\x10k\x90\xeb\x85\x8f\xc0\x00n\xd2\x07\xfa\x00\xd4\xd4"\xf9\x00\x05\xc8\xca\x07\x15\xcb\xff\xc9\xd0wt\x80\x18\xc8\xcb\x05\xcb\x02"\xcf\x16P\x05\xfa\x02\x14\xcbk\x12\xcc\xcc\xc9s\xfb\x00\xc8@\x14\x81\x01\x08\xf4Q\xf2\xa7\x02\x00p\x81\x01\x08\xd7\x18\xfa\x00\xd3?\xc8T G\x81\x01\x08\xf4Q\xf2\xa7\x82\x10notept\x80\x18\xc8\xcb\x05\xcb\x02P\x06\xcf\x16P\x04\xfa\x02\x14\xcbj\x12\xcb\x1f\xcb?\xc9s\xfb\x00\x02\x00l\x81\x01\x08\xd7\x18\xfa\x00\xd3?0R$\x81\x01\x08\xf4Y\xf2\xa7\x82\x10dstrpt\x80\x18\xc8\xcb\x05\xcb\x02P\x05\xcf\x16P\x03\xfa\x02\x13\xcbj\xcb\x1f\x12\xcb?\xc9s\xfb\x00\x00\n\xf4\x00\xc9\xedTib%\xe5')


class WalletError(ContractError):
    pass


class Wallet(Contract):
    """
    Wallet built from a key pair. Creates signed transfer messages, network is not touched:
        wallet = WalletV4R2.from_mnemonic(mnemonics)
        message = wallet.transfer(destination, amount, seqno=seqno)
        boc = message.serialize().to_boc()
    """
    max_messages = 4
    default_timeout = 60

    @classmethod
    def from_private_key(cls, *args, **kwargs): ...

    @classmethod
    def from_mnemonic(cls, mnemonics: typing.Union[list, str], *args, password: typing.Optional[str] = None,
                      **kwargs):
        _, private_key = mnemonic_to_private_key(mnemonics, password)
        return cls.from_private_key(private_key, *args, **kwargs)

    @classmethod
    def create(cls, *args, **kwargs) -> typing.Tuple[typing.List[str], "Wallet"]:
        """
        :return: new mnemonics and Wallet instance
        """
        mnemo = mnemonic_new(24)
        return mnemo, cls.from_mnemonic(mnemo, *args, **kwargs)

    @classmethod
    def check_messages(cls, messages: typing.List[WalletMessage]) -> None:
        if len(messages) > cls.max_messages:
            raise WalletError(f'for {cls.__name__} maximum messages amount is {cls.max_messages}, got {len(messages)}')

    def check_private_key(self) -> bytes:
        private_key = getattr(self, 'private_key', None)
        if private_key is None:
            raise WalletError('must specify wallet private key!')
        return private_key

    @staticmethod
    def create_wallet_internal_message(destination: typing.Union[Address, str], send_mode: int = 3, value: int = 0,
                                       body: typing.Union[Cell, str] = None,
                                       state_init: typing.Optional[StateInit] = None, **kwargs) -> WalletMessage:
        """
        :param body: Cell or text comment (stored as op 0 and snake string)
        """
        if isinstance(destination, str):
            destination = Address(destination)
        if isinstance(body, str):
            body = Builder()\
                .store_uint(0, 32)\
                .store_snake_string(body)\
                .end_cell()

        message = Contract.create_internal_msg(dest=destination, value=value, body=body, state_init=state_init, **kwargs)
        return WalletMessage(send_mode=send_mode, message=message)

    def raw_transfer(self, *args, **kwargs) -> MessageAny: ...

    def transfer(self, destination: typing.Union[Address, str], amount: int, body: typing.Union[Cell, str] = None,
                 state_init: typing.Optional[StateInit] = None, send_mode: int = 3, **kwargs) -> MessageAny:
        """
        :return: external message with transfer of amount nanotons to destination
        """
        wallet_message = self.create_wallet_internal_message(destination=destination, value=amount, body=body,
                                                             state_init=state_init, send_mode=send_mode)
        return self.raw_transfer([wallet_message], **kwargs)


class BaseWallet(Wallet):
    """
    class for user wallets such as v4r2, v3r2, etc.
    """
    code: Cell = None
    data_scheme = WalletV3Data
    body_scheme = WalletV3Body

    @classmethod
    def from_data(cls, public_key: bytes, wc: int = 0, wallet_id: typing.Optional[int] = None, **kwargs):
        data = cls.create_data_cell(public_key, wallet_id, wc)
        return cls.from_code_and_data(wc, cls.code, data, **kwargs)

    @classmethod
    def from_private_key(cls, private_key: bytes, wc: int = 0, wallet_id: typing.Optional[int] = None):
        public_key = private_key_to_public_key(private_key)
        return cls.from_data(public_key=public_key, wc=wc, wallet_id=wallet_id, private_key=private_key)

    @classmethod
    def create_data_cell(cls, public_key: bytes, wallet_id: typing.Optional[int] = None,
                         wc: typing.Optional[int] = 0) -> Cell:
        if wallet_id is None:
            wallet_id = DEFAULT_WALLET_ID + wc
        return cls.data_scheme(seqno=0, wallet_id=wallet_id, public_key=public_key).serialize()

    @classmethod
    def raw_create_transfer_msg(cls, private_key: bytes, seqno: int, wallet_id: int,
                                messages: typing.List[WalletMessage], valid_until: typing.Optional[int] = None) -> Cell:
        """
        :return: signed external message body
        """
        cls.check_messages(messages)
        if seqno == 0:
            valid_until = 2 ** 32 - 1
        elif valid_until is None:
            valid_until = generate_valid_until(cls.default_timeout)
        body = cls.body_scheme(wallet_id=wallet_id, valid_until=valid_until, seqno=seqno, messages=messages)
        body.signature = sign_message(body.signing_cell().hash, private_key)
        logger.debug(f'{cls.__name__} transfer body: seqno={seqno}, {len(messages)} messages')
        return body.serialize()

    def raw_transfer(self, msgs: typing.List[WalletMessage], seqno: int,
                     valid_until: typing.Optional[int] = None) -> MessageAny:
        """
        :param msgs: list of WalletMessages. to create one call create_wallet_internal_message meth
        :param seqno: current seqno of the deployed wallet, get it from the network.
            With seqno 0 StateInit is attached to deploy the wallet
        """
        private_key = self.check_private_key()
        body = self.raw_create_transfer_msg(private_key=private_key, seqno=seqno, wallet_id=self.wallet_id,
                                            messages=msgs, valid_until=valid_until)
        return self.create_external(body=body, include_init=seqno == 0)

    def create_init_external(self) -> MessageAny:
        private_key = self.check_private_key()
        body = self.raw_create_transfer_msg(private_key=private_key, seqno=0, wallet_id=self.wallet_id, messages=[])
        return self.create_external(body=body, include_init=True)

    def create_deploy_message(self, contract: Contract, seqno: int,
                              deploy_amount: int = int(0.05 * 10**9)) -> MessageAny:
        """
        Deploys another contract via internal message with its StateInit
        """
        return self.transfer(destination=contract.address, amount=deploy_amount, state_init=contract.state_init,
                             seqno=seqno)

    def _data(self):
        return self.data_scheme.deserialize(self.state_init.data.begin_parse())

    @property
    def seqno(self) -> int:
        """
        :return: seqno taken from contract data
        """
        return self._data().seqno

    @property
    def wallet_id(self) -> int:
        """
        :return: wallet_id taken from contract data
        """
        return self._data().wallet_id

    @property
    def public_key(self) -> bytes:
        """
        :return: public_key taken from contract data
        """
        return self._data().public_key


class WalletV2(BaseWallet):
    """
    Wallets v2r1 and v2r2. Their code is not bundled, pass the code cell of the deployed revision:
        wallet = WalletV2.from_mnemonic(mnemonics, code=code)
    """
    data_scheme = WalletV1V2Data
    body_scheme = WalletV2Body

    @classmethod
    def from_data(cls, public_key: bytes, wc: int = 0, wallet_id: typing.Optional[int] = None,
                  code: typing.Optional[Cell] = None, **kwargs):
        if code is None:
            raise WalletError(f'{cls.__name__} requires code cell')
        data = cls.create_data_cell(public_key, wallet_id, wc)
        return cls.from_code_and_data(wc, code, data, **kwargs)

    @classmethod
    def from_private_key(cls, private_key: bytes, wc: int = 0, wallet_id: typing.Optional[int] = None,
                         code: typing.Optional[Cell] = None):
        public_key = private_key_to_public_key(private_key)
        return cls.from_data(public_key=public_key, wc=wc, code=code, private_key=private_key)

    @classmethod
    def create_data_cell(cls, public_key: bytes, wallet_id: typing.Optional[int] = None,
                         wc: typing.Optional[int] = 0) -> Cell:
        return cls.data_scheme(seqno=0, public_key=public_key).serialize()

    @property
    def wallet_id(self) -> None:
        return None


class WalletV3(BaseWallet):
    data_scheme = WalletV3Data
    body_scheme = WalletV3Body


class WalletV4(BaseWallet):
    data_scheme = WalletV4Data
    body_scheme = WalletV4Body

    @property
    def plugins(self) -> typing.Optional[Cell]:
        return self._data().plugins


class WalletV3R1(WalletV3):
    code = WALLET_V3_R1_CODE


class WalletV3R2(WalletV3):
    code = WALLET_V3_R2_CODE


class WalletV4R2(WalletV4):
    code = WALLET_V4_R2_CODE
