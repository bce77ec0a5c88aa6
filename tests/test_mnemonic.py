import pytest

from toncore.crypto import mnemonic_new, mnemonic_is_valid, mnemonic_to_private_key, private_key_to_public_key, \
    sign_message, verify_sign, MnemonicError, InvalidMnemonic
from toncore.crypto.keys import check_mnemonic, normalize_mnemonic


MNEMONIC = 'dose ice enrich trigger test dove century still betray gas diet dune use other base gym mad law immense ' \
           'village world example praise game'
PRIVATE_KEY = '119dcf2840a3d56521d260b2f125eedc0d4f3795b9e627269a4b5a6dca8257bd' \
              'c04ad1885c127fe863abb00752fa844e6439bb04f264d70de7cea580b32637ab'


def test_private_key_from_mnemonic():
    public_key, private_key = mnemonic_to_private_key(MNEMONIC)
    assert private_key.hex() == PRIVATE_KEY
    assert public_key == private_key[32:]
    assert private_key_to_public_key(private_key) == public_key
    assert private_key_to_public_key(private_key[:32]) == public_key

    # words list and extra spaces give the same keys
    assert mnemonic_to_private_key(f'  {MNEMONIC}  '.upper().split()) == (public_key, private_key)


def test_validation():
    assert mnemonic_is_valid(MNEMONIC)
    assert mnemonic_is_valid(' ' + MNEMONIC.replace(' ', '  ') + ' ')
    assert not mnemonic_is_valid(MNEMONIC.split()[:12])
    assert not mnemonic_is_valid(['a'])
    # unknown word
    assert not mnemonic_is_valid(MNEMONIC.replace('dose', 'doze'))

    with pytest.raises(InvalidMnemonic):
        check_mnemonic(normalize_mnemonic('a'))
    with pytest.raises(InvalidMnemonic):
        mnemonic_to_private_key(['a'])
    with pytest.raises(MnemonicError):
        private_key_to_public_key(b'\x00' * 16)


def test_new_mnemonic():
    words = mnemonic_new()
    assert len(words) == 24
    assert mnemonic_is_valid(words)

    words = mnemonic_new(password='secret')
    assert mnemonic_is_valid(words, password='secret')
    mnemonic_to_private_key(words, password='secret')


def test_sign():
    public_key, private_key = mnemonic_to_private_key(MNEMONIC)
    message = b'toncore'
    signature = sign_message(message, private_key)
    assert len(signature) == 64
    assert signature == sign_message(message, private_key)
    assert verify_sign(public_key, message, signature)
    assert not verify_sign(public_key, b'other', signature)
    assert not verify_sign(public_key, message, bytes(64))


def test_checksum_mismatch():
    # known words, but the first two are swapped so the seed check fails
    words = MNEMONIC.split()
    words[0], words[1] = words[1], words[0]
    assert not mnemonic_is_valid(words)
    with pytest.raises(InvalidMnemonic):
        check_mnemonic(words)
    with pytest.raises(InvalidMnemonic):
        mnemonic_to_private_key(words)

    public_key, private_key = mnemonic_to_private_key(words, validate=False)
    assert len(private_key) == 64 and public_key == private_key[32:]
    assert private_key.hex() != PRIVATE_KEY
    assert mnemonic_to_private_key(MNEMONIC, validate=False)[1].hex() == PRIVATE_KEY
