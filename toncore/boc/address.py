import base64
import binascii
import typing

from bitarray import bitarray, frozenbitarray

from ..crypto.crc import crc16


class AddressError(BaseException):
    pass


class InvalidChecksum(AddressError):
    pass


class InvalidLength(AddressError):
    pass


class InvalidWorkchain(AddressError):
    pass


class Anycast:
    """
    anycast_info$_ depth:(#<= 30) { depth >= 1 } rewrite_pfx:(bits depth) = Anycast;
    """
    def __init__(self, depth: int, rewrite_pfx: typing.Union[bitarray, str]):
        if not 1 <= depth <= 30:
            from ..tlb.tlb import SchemaMismatch
            raise SchemaMismatch(f'Anycast depth must be in range 1..30, got {depth}')
        rewrite_pfx = frozenbitarray(rewrite_pfx)
        if len(rewrite_pfx) != depth:
            raise AddressError(f'Anycast rewrite_pfx must have {depth} bits, got {len(rewrite_pfx)}')
        self.depth = depth
        self.rewrite_pfx = rewrite_pfx

    def __eq__(self, other) -> bool:
        if not isinstance(other, Anycast):
            return NotImplemented
        return self.depth == other.depth and self.rewrite_pfx == other.rewrite_pfx

    def __repr__(self) -> str:
        return f'Anycast<{self.depth}:{self.rewrite_pfx.to01()}>'


class Address:
    """
    addr_std. Accepts raw form ('0:e4d9...') and user-friendly form (48 chars, base64 or base64url),
    tuple (wc, hash_part) or another Address.
    Equality and hash use only workchain and hash part.
    """

    def __init__(self, address: typing.Union[str, tuple, "Address"], anycast: typing.Optional[Anycast] = None):
        self.wc: int = None
        self.hash_part: bytes = None
        self.anycast: typing.Optional[Anycast] = anycast
        self.is_bounceable = True
        self.is_test_only = False
        self.is_user_friendly = False

        if isinstance(address, tuple):
            # Address((-1, b'\x11\x01\xff...'))
            wc, hash_part = address
            if not isinstance(hash_part, (bytes, bytearray)) or len(hash_part) != 32:
                raise InvalidLength('expected 32 bytes address hash part')
            self.wc = self._check_wc(wc)
            self.hash_part = bytes(hash_part)
            return
        if isinstance(address, Address):
            self.wc = address.wc
            self.hash_part = address.hash_part
            self.anycast = anycast if anycast is not None else address.anycast
            self.is_bounceable = address.is_bounceable
            self.is_test_only = address.is_test_only
            self.is_user_friendly = address.is_user_friendly
            return
        if isinstance(address, str):
            if ':' in address:
                self._parse_raw(address)
            else:
                self._parse_user_friendly(address)
            return

        raise AddressError(f'unknown address type provided: {type(address).__name__}')

    @staticmethod
    def _check_wc(wc) -> int:
        if not isinstance(wc, int) or not -2 ** 31 <= wc < 2 ** 31:
            raise InvalidWorkchain(f'invalid workchain {wc}')
        return wc

    def _parse_raw(self, addr: str) -> None:
        wc, _, hash_part = addr.partition(':')
        try:
            wc = int(wc)
        except ValueError:
            raise InvalidWorkchain(f'invalid workchain in address {addr}')
        self.wc = self._check_wc(wc)
        try:
            self.hash_part = bytes.fromhex(hash_part)
        except ValueError:
            raise InvalidLength(f'address hash part must be 64 hex chars, got {hash_part}')
        if len(self.hash_part) != 32:
            raise InvalidLength(f'address hash part must be 32 bytes, got {len(self.hash_part)}')

    def _parse_user_friendly(self, addr: str) -> None:
        if len(addr) != 48:
            raise InvalidLength(f'user-friendly address must be 48 chars, got {len(addr)}')
        try:
            decoded = base64.b64decode(addr.replace('-', '+').replace('_', '/'), validate=True)
        except binascii.Error:
            raise InvalidLength(f'can not decode address {addr}')
        if len(decoded) != 36:
            raise InvalidLength(f'user-friendly address must be 36 bytes, got {len(decoded)}')
        if decoded[34:] != crc16(decoded[:34]):
            raise InvalidChecksum(f'address {addr} has invalid checksum')

        tag = decoded[0]
        if tag & 0x80:  # test flag
            self.is_test_only = True
            tag ^= 0x80
        if tag == 0x11:
            self.is_bounceable = True
        elif tag == 0x51:
            self.is_bounceable = False
        else:
            raise AddressError(f'unknown address tag {decoded[0]}')
        self.is_user_friendly = True
        self.wc = int.from_bytes(decoded[1:2], 'big', signed=True)
        self.hash_part = decoded[2:34]

    @property
    def address_bits(self) -> frozenbitarray:
        result = bitarray()
        result.frombytes(self.hash_part)
        return frozenbitarray(result)

    def to_str(self, is_user_friendly: bool = True, is_url_safe: bool = True, is_bounceable: bool = True,
               is_test_only: bool = False) -> str:
        if not is_user_friendly:
            return f'{self.wc}:{self.hash_part.hex()}'

        if not -128 <= self.wc < 128:
            raise InvalidWorkchain(f'workchain {self.wc} can not be encoded in user-friendly form')

        tag = 0x11  # bounceable tag
        if not is_bounceable:
            tag = 0x51
        if is_test_only:
            tag |= 0x80

        result = tag.to_bytes(1, 'big') + self.wc.to_bytes(1, 'big', signed=True) + self.hash_part
        result += crc16(result)

        if is_url_safe:
            return base64.urlsafe_b64encode(result).decode()
        return base64.b64encode(result).decode()

    def to_cell(self):
        from .builder import Builder
        return Builder().store_address(self).end_cell()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.wc == other.wc and self.hash_part == other.hash_part

    def __hash__(self) -> int:
        return hash((self.wc, self.hash_part))

    def __str__(self) -> str:
        return self.to_str()

    def __repr__(self) -> str:
        if not -128 <= self.wc < 128:
            return f'Address<{self.to_str(is_user_friendly=False)}>'
        return f'Address<{self.to_str()}>'


class ExternalAddress:
    """
    addr_extern$01 len:(## 9) external_address:(bits len) = MsgAddressExt;
    """
    def __init__(self, external_address: typing.Union[bitarray, str, int], len: typing.Optional[int] = None):
        if isinstance(external_address, int):
            if len is None:
                len = external_address.bit_length()
            bits = bitarray()
            if len:
                from bitarray.util import int2ba
                bits = int2ba(external_address, len)
            external_address = bits
        external_address = frozenbitarray(external_address)
        if len is not None and len != external_address.__len__():
            raise InvalidLength(f'external address has {external_address.__len__()} bits, expected {len}')
        if external_address.__len__() >= 512:
            raise InvalidLength('external address can not be longer than 511 bits')
        self.external_address = external_address

    @property
    def len(self) -> int:
        return len(self.external_address)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ExternalAddress):
            return NotImplemented
        return self.external_address == other.external_address

    def __hash__(self) -> int:
        return hash(self.external_address)

    def __repr__(self) -> str:
        return f'ExternalAddress<{self.len}:{self.external_address.to01()}>'


class VarAddress:
    """
    addr_var$11 anycast:(Maybe Anycast) addr_len:(## 9) workchain_id:int32 address:(bits addr_len) = MsgAddressInt;
    """
    def __init__(self, wc: int, address_bits: typing.Union[bitarray, str], anycast: typing.Optional[Anycast] = None):
        self.wc = Address._check_wc(wc)
        self.address_bits = frozenbitarray(address_bits)
        if len(self.address_bits) >= 512:
            raise InvalidLength('address can not be longer than 511 bits')
        self.anycast = anycast

    def __eq__(self, other) -> bool:
        if not isinstance(other, VarAddress):
            return NotImplemented
        return self.wc == other.wc and self.address_bits == other.address_bits

    def __hash__(self) -> int:
        return hash((self.wc, self.address_bits))

    def __repr__(self) -> str:
        return f'VarAddress<{self.wc}:{self.address_bits.to01()}>'
