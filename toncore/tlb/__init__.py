from .tlb import TlbError, SchemaMismatch, TlbScheme
from .utils import EitherLayout, store_either, load_either, load_rest
from .account import StateInit, TickTock
from .block import CurrencyCollection, ExtraCurrencyCollection
from .transaction import CommonMsgInfo, InternalMsgInfo, ExternalMsgInfo, ExternalOutMsgInfo, MessageAny

from .custom import *
