from .wallet import WalletV1V2Data, WalletV3Data, WalletV4Data, WalletV5R1Data, HighloadWalletData, WalletMessage, \
    WalletV2Body, WalletV3Body, WalletV4Body, WalletV5Body, HighloadWalletBody, OutAction, OutActionSendMsg, \
    OutActionSetCode, OutActionReserveCurrency, OutActionChangeLibrary, OutList, DEFAULT_WALLET_ID
from .jetton import JettonTransfer, JETTON_TRANSFER_OP
from .nft import NftTransfer, NFT_TRANSFER_OP
