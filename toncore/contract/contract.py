import typing

from ..boc.cell import Cell
from ..boc.address import Address, ExternalAddress
from ..tlb.account import StateInit
from ..tlb.block import CurrencyCollection
from ..tlb.transaction import ExternalMsgInfo, MessageAny, InternalMsgInfo


class ContractError(BaseException):
    pass


class Contract:
    """
    Contract identified by its address and (optionally) its StateInit.
    Builds messages to the contract, sending them is up to the caller:
        contract.create_external(body).serialize().to_boc()
    """

    def __init__(self, address: Address, state_init: typing.Optional[StateInit] = None, **kwargs):
        """
        :param address: contract address
        :param state_init: account state init. usually used for contract deploying
        :param kwargs: some additional contract attributes. for e.g. private key for wallet contracts
        """
        self.address = address
        self.state_init: typing.Optional[StateInit] = state_init

        for k, v in kwargs.items():
            setattr(self, k, v)

    @property
    def data(self) -> typing.Optional[Cell]:
        if self.state_init is None:
            return None
        return self.state_init.data

    @property
    def code(self) -> typing.Optional[Cell]:
        if self.state_init is None:
            return None
        return self.state_init.code

    @classmethod
    def from_state_init(cls, workchain: int, state_init: StateInit, **kwargs):
        return cls(address=state_init.address(workchain), state_init=state_init, **kwargs)

    @classmethod
    def from_code_and_data(cls, workchain: int, code: Cell, data: Cell, **kwargs):
        state_init = StateInit(code=code, data=data)
        return cls.from_state_init(workchain=workchain, state_init=state_init, **kwargs)

    @staticmethod
    def create_external_msg(src: typing.Optional[ExternalAddress] = None, dest: typing.Optional[Address] = None,
                            import_fee: int = 0, state_init: typing.Optional[StateInit] = None,
                            body: typing.Optional[Cell] = None) -> MessageAny:
        info = ExternalMsgInfo(src, dest, import_fee)
        if body is None:
            body = Cell.empty()
        message = MessageAny(info=info, init=state_init, body=body)
        return message

    @staticmethod
    def create_internal_msg(ihr_disabled: bool = True, bounce: typing.Optional[bool] = None, bounced: bool = False,
                            src: typing.Optional[Address] = None, dest: typing.Optional[Address] = None,
                            value: typing.Union[CurrencyCollection, int] = 0, ihr_fee: int = 0, fwd_fee: int = 0,
                            created_lt: int = 0,
                            created_at: int = 0, state_init: typing.Optional[StateInit] = None,
                            body: typing.Optional[Cell] = None) -> MessageAny:
        if isinstance(value, int):
            value = CurrencyCollection(grams=value, other=None)
        if bounce is None:
            bounce = dest.is_bounceable if isinstance(dest, Address) else True
        info = InternalMsgInfo(ihr_disabled, bounce, bounced, src, dest, value, ihr_fee, fwd_fee, created_lt, created_at)
        if body is None:
            body = Cell.empty()
        message = MessageAny(info=info, init=state_init, body=body)
        return message

    def create_external(self, body: typing.Optional[Cell] = None, include_init: bool = False,
                        src: typing.Optional[ExternalAddress] = None, import_fee: int = 0) -> MessageAny:
        """
        External message to this contract. With include_init StateInit is attached for deploy
        """
        state_init = None
        if include_init:
            if self.state_init is None:
                raise ContractError('contract does not have state_init attribute')
            state_init = self.state_init
        return self.create_external_msg(src=src, dest=self.address, import_fee=import_fee, state_init=state_init,
                                        body=body)

    def create_init_external(self) -> MessageAny:
        return self.create_external(include_init=True)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.address}>'
