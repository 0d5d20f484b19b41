from tradewire.dispatch.message import build_trade_message, encode_raw_message
from tradewire.dispatch.pipeline import TradeDispatchPipeline, DispatchResult

__all__ = [
    "build_trade_message",
    "encode_raw_message",
    "TradeDispatchPipeline",
    "DispatchResult",
]
