from .contract import Contract, ContractError
from .utils import generate_query_id
from .wallets import *
