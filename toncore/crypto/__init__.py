from .crc import crc16, crc32c
from .keys import MnemonicError, InvalidMnemonic, mnemonic_new, mnemonic_is_valid, mnemonic_to_private_key, \
    private_key_to_public_key
from .signature import sign_message, verify_sign
