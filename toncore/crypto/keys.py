import hashlib
import hmac
import logging
import secrets
import typing

from mnemonic import Mnemonic
from nacl.bindings import crypto_sign_seed_keypair


logger = logging.getLogger('toncore.crypto')

WORDLIST: typing.List[str] = Mnemonic('english').wordlist
WORDSET = frozenset(WORDLIST)

PBKDF_ITERATIONS = 100000


class MnemonicError(BaseException):
    pass


class InvalidMnemonic(MnemonicError):
    pass


def normalize_mnemonic(mnemonic_words: typing.Union[str, typing.List[str]]) -> typing.List[str]:
    if isinstance(mnemonic_words, str):
        mnemonic_words = mnemonic_words.split()
    return [w.strip().lower() for w in mnemonic_words if w.strip()]


def mnemonic_to_entropy(mnemonic_words: typing.List[str], password: typing.Optional[str] = None) -> bytes:
    key = ' '.join(mnemonic_words).encode()
    msg = password.encode() if password else b''
    return hmac.new(key, msg, hashlib.sha512).digest()


def pbkdf2_sha512(key: bytes, salt: str, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac('sha512', key, salt.encode(), iterations, 64)


def is_basic_seed(entropy: bytes) -> bool:
    seed = pbkdf2_sha512(entropy, 'TON seed version', max(1, PBKDF_ITERATIONS // 256))
    return seed[0] == 0


def is_password_seed(entropy: bytes) -> bool:
    seed = pbkdf2_sha512(entropy, 'TON fast seed version', 1)
    return seed[0] == 1


def check_mnemonic(mnemonic_words: typing.List[str], password: typing.Optional[str] = None) -> None:
    """
    Raises InvalidMnemonic if words count, words themselves or the checksum of derived entropy are wrong
    """
    if len(mnemonic_words) != 24:
        raise InvalidMnemonic(f'mnemonic must contain 24 words, got {len(mnemonic_words)}')
    for word in mnemonic_words:
        if word not in WORDSET:
            raise InvalidMnemonic(f'unknown mnemonic word: {word}')

    if password:
        if not is_password_seed(mnemonic_to_entropy(mnemonic_words)):
            raise InvalidMnemonic('mnemonic is not a password mnemonic')
        if is_basic_seed(mnemonic_to_entropy(mnemonic_words, password)):
            raise InvalidMnemonic('password mnemonic must not be a valid passwordless mnemonic')
    elif not is_basic_seed(mnemonic_to_entropy(mnemonic_words)):
        raise InvalidMnemonic('mnemonic checksum is invalid')


def mnemonic_is_valid(mnemonic_words: typing.Union[str, typing.List[str]], password: typing.Optional[str] = None) -> bool:
    try:
        check_mnemonic(normalize_mnemonic(mnemonic_words), password)
    except InvalidMnemonic:
        return False
    return True


def mnemonic_to_seed(mnemonic_words: typing.Union[str, typing.List[str]], password: typing.Optional[str] = None,
                     validate: bool = True) -> bytes:
    words = normalize_mnemonic(mnemonic_words)
    if validate:
        check_mnemonic(words, password)
    entropy = mnemonic_to_entropy(words, password)
    return pbkdf2_sha512(entropy, 'TON default seed', PBKDF_ITERATIONS)


def mnemonic_to_private_key(mnemonic_words: typing.Union[str, typing.List[str]],
                            password: typing.Optional[str] = None,
                            validate: bool = True) -> typing.Tuple[bytes, bytes]:
    """
    :return: public key (32 bytes) and private key (64 bytes: seed + public key)
    """
    seed = mnemonic_to_seed(mnemonic_words, password, validate)
    return crypto_sign_seed_keypair(seed[:32])


def mnemonic_new(words_count: int = 24, password: typing.Optional[str] = None) -> typing.List[str]:
    attempts = 0
    while True:
        attempts += 1
        words = [secrets.choice(WORDLIST) for _ in range(words_count)]
        if password:
            if not is_password_seed(mnemonic_to_entropy(words)):
                continue
            if is_basic_seed(mnemonic_to_entropy(words, password)):
                continue
        elif not is_basic_seed(mnemonic_to_entropy(words)):
            continue
        logger.debug(f'generated mnemonic after {attempts} attempts')
        return words


def private_key_to_public_key(private_key: bytes) -> bytes:
    """
    :param private_key: 32 bytes seed or 64 bytes ed25519 secret key
    """
    if len(private_key) == 64:
        return private_key[32:]
    if len(private_key) == 32:
        return crypto_sign_seed_keypair(private_key)[0]
    raise MnemonicError(f'private key must be 32 or 64 bytes, got {len(private_key)}')
