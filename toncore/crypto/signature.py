from nacl.signing import VerifyKey, exc
from nacl.bindings import crypto_sign, crypto_sign_BYTES


def verify_sign(public_key: bytes, signed_message: bytes, signature: bytes) -> bool:
    key = VerifyKey(public_key)
    try:
        key.verify(signed_message, signature)
        return True
    except exc.BadSignatureError:
        return False


def sign_message(message: bytes, signing_key: bytes) -> bytes:
    """
    :param message: bytes to sign, for wallets it is the hash of the signing cell
    :param signing_key: 64 bytes ed25519 secret key (seed + public key)
    :return: 64 bytes signature
    """
    raw_signed = crypto_sign(message, signing_key)
    return raw_signed[:crypto_sign_BYTES]
