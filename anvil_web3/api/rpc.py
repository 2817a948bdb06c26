"""
Anvil JSON-RPC method catalog and the parameter/response formatters for it.
"""
from __future__ import annotations
import re
from enum import Enum
from dataclasses import dataclass
from typing import Optional, Any
from anvil_web3.core import types


class RPCEndpoint(str, Enum):
    """
    JSON-RPC methods supported by an Anvil node. The value is the method name as used on the wire.
    """

    # standard methods
    ANVIL_IMPERSONATE_ACCOUNT = "anvil_impersonateAccount"
    ANVIL_STOP_IMPERSONATING_ACCOUNT = "anvil_stopImpersonatingAccount"
    ANVIL_AUTO_IMPERSONATE_ACCOUNT = "anvil_autoImpersonateAccount"
    ANVIL_GET_AUTOMINE = "anvil_getAutomine"
    ANVIL_MINE = "anvil_mine"
    ANVIL_DROP_TRANSACTION = "anvil_dropTransaction"
    ANVIL_RESET = "anvil_reset"
    ANVIL_SET_RPC_URL = "anvil_setRpcUrl"
    ANVIL_SET_BALANCE = "anvil_setBalance"
    ANVIL_SET_CODE = "anvil_setCode"
    ANVIL_SET_NONCE = "anvil_setNonce"
    ANVIL_SET_STORAGE_AT = "anvil_setStorageAt"
    ANVIL_SET_COINBASE = "anvil_setCoinbase"
    ANVIL_SET_LOGGING_ENABLED = "anvil_setLoggingEnabled"
    ANVIL_SET_MIN_GAS_PRICE = "anvil_setMinGasPrice"
    ANVIL_SET_NEXT_BLOCK_BASE_FEE_PER_GAS = "anvil_setNextBlockBaseFeePerGas"
    ANVIL_SET_CHAIN_ID = "anvil_setChainId"
    ANVIL_DUMP_STATE = "anvil_dumpState"
    ANVIL_LOAD_STATE = "anvil_loadState"
    ANVIL_NODE_INFO = "anvil_nodeInfo"

    # special methods
    EVM_SET_AUTOMINE = "evm_setAutomine"
    EVM_SET_INTERVAL_MINING = "evm_setIntervalMining"
    EVM_SNAPSHOT = "evm_snapshot"
    EVM_REVERT = "evm_revert"
    EVM_INCREASE_TIME = "evm_increaseTime"
    EVM_SET_NEXT_BLOCK_TIMESTAMP = "evm_setNextBlockTimestamp"
    ANVIL_SET_BLOCK_TIMESTAMP_INTERVAL = "anvil_setBlockTimestampInterval"
    EVM_SET_BLOCK_GAS_LIMIT = "evm_setBlockGasLimit"
    ANVIL_REMOVE_BLOCK_TIMESTAMP_INTERVAL = "anvil_removeBlockTimestampInterval"
    EVM_MINE = "evm_mine"
    ANVIL_ENABLE_TRACES = "anvil_enableTraces"
    ETH_SEND_UNSIGNED_TRANSACTION = "eth_sendUnsignedTransaction"

    # geth compatible transaction pool methods
    TXPOOL_STATUS = "txpool_status"
    TXPOOL_INSPECT = "txpool_inspect"
    TXPOOL_CONTENT = "txpool_content"

    def __str__(self):
        return self.value


@dataclass
class ResetOptions:
    """
    Forking options for `anvil_reset`.
    """

    json_rpc_url: Optional[str] = None
    block_number: Optional[int | str] = None

    def to_json(self) -> dict:
        json: dict = {}
        if self.json_rpc_url is not None:
            json["jsonRpcUrl"] = self.json_rpc_url
        if self.block_number is not None:
            json["blockNumber"] = self.block_number
        return json

    @classmethod
    def from_json(cls, json: dict):
        return cls(json.get("jsonRpcUrl", None), json.get("blockNumber", None))


_ADDRESS_PATTERN = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")
_BYTES_PATTERN = re.compile(r"^0x[0-9a-fA-F]*$")


def is_valid_address(value: Any) -> bool:
    """
    Check if `value` is a 40 hex digit address string. The `0x` prefix is optional.
    """
    return isinstance(value, str) and _ADDRESS_PATTERN.match(value) is not None


def is_valid_bytes(value: Any) -> bool:
    """
    Check if `value` is a `0x` prefixed hex string or a bytes-like object.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return True
    return isinstance(value, str) and _BYTES_PATTERN.match(value) is not None


def to_normalized_address(address: Any) -> types.Address:
    """
    Convert `address` to an Address.

    Args:
        address: a hex string or an Address. Any other type yields the zero address.
    """
    if isinstance(address, str):
        return types.Address.from_hex(address)
    if isinstance(address, types.Address):
        return address
    return types.Address.zero()


def to_hex_if_bytes(data: Any) -> str:
    """
    Convert `data` to a `0x` prefixed hex string.

    Strings are not validated. They only gain the `0x` prefix if it is missing. Unsupported types yield an empty
    string.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return "0x" + bytes(data).hex()
    if isinstance(data, str):
        if data.startswith("0x"):
            return data
        return "0x" + data
    return ""


def to_hex_if_integer(number: Any) -> str:
    """
    Convert `number` to a minimal width hex string e.g. 1000 -> 0x3e8.

    `None`, booleans and other non integer types yield "0x0".
    """
    if isinstance(number, int) and not isinstance(number, bool):
        return hex(number)
    return "0x0"


def format_request(method: RPCEndpoint | str, *params) -> list:
    """
    Format the request parameters as expected on the wire for `method`.

    Methods without formatting rules, or called with too few parameters, get their parameters back unchanged.
    """
    if method in (
        RPCEndpoint.ANVIL_IMPERSONATE_ACCOUNT,
        RPCEndpoint.ANVIL_STOP_IMPERSONATING_ACCOUNT,
    ):
        if len(params) > 0:
            return [to_normalized_address(params[0])]
    elif method == RPCEndpoint.ANVIL_SET_BALANCE:
        if len(params) > 1:
            return [to_normalized_address(params[0]), to_hex_if_integer(params[1])]
    elif method == RPCEndpoint.ANVIL_SET_CODE:
        if len(params) > 1:
            return [to_normalized_address(params[0]), to_hex_if_bytes(params[1])]
    elif method == RPCEndpoint.ANVIL_SET_STORAGE_AT:
        if len(params) > 2:
            return [
                to_normalized_address(params[0]),
                to_hex_if_integer(params[1]),
                to_hex_if_bytes(params[2]),
            ]
    return list(params)


def format_response(method: RPCEndpoint | str, response: Any) -> Any:
    """
    Convert the decoded `result` of a `method` call into a richer type where applicable.

    A response not of the expected type is returned unchanged.
    """
    if method in (RPCEndpoint.ANVIL_GET_AUTOMINE, RPCEndpoint.ANVIL_SET_STORAGE_AT):
        if isinstance(response, bool):
            return response
    elif method == RPCEndpoint.ANVIL_DROP_TRANSACTION:
        if isinstance(response, str):
            return types.Hash32.from_hex(response)
    return response
