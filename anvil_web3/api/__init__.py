"""
Classes to interact with an Anvil development node such as the method formatters, a facade for the Anvil specific
 RPC methods and a process launcher.
"""
from .rpc import RPCEndpoint, ResetOptions, format_request, format_response
from .anvil import Anvil, JsonRpcError, RpcErrorCode
from .instance import AnvilInstance, AnvilStartupError

__all__ = [
    "RPCEndpoint",
    "ResetOptions",
    "format_request",
    "format_response",
    "Anvil",
    "JsonRpcError",
    "RpcErrorCode",
    "AnvilInstance",
    "AnvilStartupError",
]
