from .boc import Cell, Builder, Slice, Boc, HashMap, Address, begin_cell
from .crypto import mnemonic_new, mnemonic_is_valid, mnemonic_to_private_key, sign_message, verify_sign
