from .wallet import WalletError, Wallet, BaseWallet, WalletV2, WalletV3, WalletV4, WalletV3R1, WalletV3R2, WalletV4R2, \
    WALLET_V3_R1_CODE, WALLET_V3_R2_CODE, WALLET_V4_R2_CODE
from .wallet_v5 import WalletV5R1, WalletV5WalletID, WALLET_V5_R1_CODE, DEFAULT_WALLET_ID_V5R1, \
    DEFAULT_WALLET_ID_V5R1_TESTNET, MAINNET_GLOBAL_ID, TESTNET_GLOBAL_ID
from .highload import HighloadWallet, HIGHLOAD_WALLET_CODE
from ...tlb.custom.wallet import DEFAULT_WALLET_ID
