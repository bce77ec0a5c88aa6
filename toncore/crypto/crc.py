def _crc16_table() -> list:
    table = []
    for byte in range(256):
        crc = byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ 0x1021
            else:
                crc <<= 1
        table.append(crc & 0xffff)
    return table


def _crc32c_table() -> list:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ 0x82f63b78
            else:
                crc >>= 1
        table.append(crc)
    return table


CRC16_TABLE = _crc16_table()
CRC32C_TABLE = _crc32c_table()


def crc16(data: bytes) -> bytes:
    """
    CRC-16/XMODEM, used by user-friendly addresses
    :return: 2 bytes, big endian
    """
    crc = 0
    for byte in data:
        crc = ((crc << 8) & 0xffff) ^ CRC16_TABLE[((crc >> 8) ^ byte) & 0xff]
    return crc.to_bytes(2, 'big')


def crc32c(data: bytes) -> bytes:
    """
    CRC-32C (Castagnoli), used by bag of cells
    :return: 4 bytes, little endian
    """
    crc = 0xffffffff
    for byte in data:
        crc = (crc >> 8) ^ CRC32C_TABLE[(crc ^ byte) & 0xff]
    return (crc ^ 0xffffffff).to_bytes(4, 'little')
