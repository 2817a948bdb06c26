"""
Facade for the Anvil specific JSON-RPC methods.
"""
from __future__ import annotations
from enum import IntEnum
from typing import Optional, Any, Callable, Awaitable
from anvil_web3 import api_logger as logger
from anvil_web3.core import types
from anvil_web3.api.rpc import RPCEndpoint, ResetOptions, format_request, format_response

#: A coroutine taking a JSON-RPC request object and returning the decoded JSON-RPC response object.
Sender = Callable[[dict], Awaitable[dict]]


class RpcErrorCode(IntEnum):
    """
    Standard JSON-RPC 2.0 error codes.
    """

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class JsonRpcError(Exception):
    def __init__(self, code: int, message: str, data: Optional[str] = None):
        super(JsonRpcError, self).__init__(message)
        self.code = code
        self.message = message
        self.data = "" if data is None else str(data)

    def __str__(self):
        if len(self.data) > 0:
            return f"code={self.code}, message={self.message}, data={self.data}"
        else:
            return f"code={self.code}, message={self.message}"


def _to_json(param: Any) -> Any:
    if isinstance(param, (types.Address, types.Hash32, ResetOptions)):
        return param.to_json()
    if isinstance(param, (list, tuple)):
        return [_to_json(p) for p in param]
    if isinstance(param, dict):
        return {k: _to_json(v) for k, v in param.items()}
    return param


class Anvil:
    """
    Anvil node control methods on top of a JSON-RPC sender.

    Example:
        async def send(payload: dict) -> dict:
            async with session.post(url, json=payload) as response:
                return await response.json()

        anvil = Anvil(send)
        await anvil.set_balance("0x1000000000000000000000000000000000000000", 10**18)
    """

    def __init__(self, send: Sender):
        self._send = send
        self._request_id = 0

    async def make_request(self, method: RPCEndpoint | str, *params) -> Any:
        """
        Format `params`, send the request and format the result.

        Raises:
            JsonRpcError: if the node responds with an error object.
        """
        method = str(method)
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": _to_json(format_request(method, *params)),
        }
        logger.debug(f"Sending {method} with id {self._request_id}.")
        response = await self._send(payload)
        if "error" in response:
            error = response["error"]
            logger.debug(f"{method} failed: {error}")
            if not isinstance(error, dict):
                raise JsonRpcError(int(RpcErrorCode.INTERNAL_ERROR), str(error))
            raise JsonRpcError(
                int(error.get("code", RpcErrorCode.INTERNAL_ERROR)),
                error.get("message", ""),
                error.get("data", None),
            )
        return format_response(method, response.get("result", None))

    async def impersonate_account(self, account: types.Address | str) -> None:
        """
        Send transactions from `account` without its private key.
        """
        await self.make_request(RPCEndpoint.ANVIL_IMPERSONATE_ACCOUNT, account)

    async def stop_impersonating_account(self, account: types.Address | str) -> None:
        await self.make_request(RPCEndpoint.ANVIL_STOP_IMPERSONATING_ACCOUNT, account)

    async def auto_impersonate_account(self, enabled: bool) -> None:
        """
        Impersonate every account, or stop doing so.
        """
        await self.make_request(RPCEndpoint.ANVIL_AUTO_IMPERSONATE_ACCOUNT, enabled)

    async def get_automine(self) -> bool:
        return await self.make_request(RPCEndpoint.ANVIL_GET_AUTOMINE)

    async def set_automine(self, enabled: bool) -> None:
        await self.make_request(RPCEndpoint.EVM_SET_AUTOMINE, enabled)

    async def mine(
        self, num_blocks: Optional[int] = None, interval: Optional[int] = None
    ) -> None:
        """
        Mine `num_blocks` blocks (default 1) with `interval` seconds between their timestamps.
        """
        await self.make_request(RPCEndpoint.ANVIL_MINE, num_blocks, interval)

    async def set_interval_mining(self, seconds: int) -> None:
        await self.make_request(RPCEndpoint.EVM_SET_INTERVAL_MINING, seconds)

    async def drop_transaction(
        self, tx_hash: types.Hash32 | str
    ) -> Optional[types.Hash32]:
        """
        Remove a transaction from the pool.

        Returns:
            the hash of the dropped transaction or None if it was not in the pool.
        """
        return await self.make_request(RPCEndpoint.ANVIL_DROP_TRANSACTION, tx_hash)

    async def reset(self, forking: Optional[ResetOptions] = None) -> None:
        """
        Reset the chain, optionally forking from a remote node.
        """
        if forking is None:
            await self.make_request(RPCEndpoint.ANVIL_RESET)
        else:
            await self.make_request(RPCEndpoint.ANVIL_RESET, forking)

    async def set_chain_id(self, chain_id: int) -> None:
        await self.make_request(RPCEndpoint.ANVIL_SET_CHAIN_ID, chain_id)

    async def set_balance(self, account: types.Address | str, balance: int) -> None:
        """
        Set the balance of `account` in wei.
        """
        await self.make_request(RPCEndpoint.ANVIL_SET_BALANCE, account, balance)

    async def set_code(
        self, address: types.Address | str, code: bytes | str
    ) -> None:
        await self.make_request(RPCEndpoint.ANVIL_SET_CODE, address, code)

    async def set_nonce(self, address: types.Address | str, nonce: int) -> None:
        await self.make_request(RPCEndpoint.ANVIL_SET_NONCE, address, nonce)

    async def set_storage_at(
        self, address: types.Address | str, slot: int, value: bytes | str
    ) -> bool:
        """
        Write a single storage slot of a contract.

        Args:
            address: the contract address.
            slot: the storage slot.
            value: the 32 byte value to store.
        """
        return await self.make_request(
            RPCEndpoint.ANVIL_SET_STORAGE_AT, address, slot, value
        )

    async def set_next_block_timestamp(self, timestamp: int) -> None:
        await self.make_request(RPCEndpoint.EVM_SET_NEXT_BLOCK_TIMESTAMP, timestamp)

    async def snapshot(self) -> str:
        """
        Snapshot the state of the chain.

        Returns:
            the snapshot id to use with :py:meth:`revert`.
        """
        return await self.make_request(RPCEndpoint.EVM_SNAPSHOT)

    async def revert(self, snapshot_id: str) -> bool:
        return await self.make_request(RPCEndpoint.EVM_REVERT, snapshot_id)

    async def increase_time(self, seconds: int) -> int:
        return await self.make_request(RPCEndpoint.EVM_INCREASE_TIME, seconds)

    async def dump_state(self) -> str:
        return await self.make_request(RPCEndpoint.ANVIL_DUMP_STATE)

    async def load_state(self, state: str) -> bool:
        return await self.make_request(RPCEndpoint.ANVIL_LOAD_STATE, state)

    async def node_info(self) -> dict:
        return await self.make_request(RPCEndpoint.ANVIL_NODE_INFO)

    async def txpool_status(self) -> dict:
        return await self.make_request(RPCEndpoint.TXPOOL_STATUS)

    async def txpool_inspect(self) -> dict:
        return await self.make_request(RPCEndpoint.TXPOOL_INSPECT)

    async def txpool_content(self) -> dict:
        return await self.make_request(RPCEndpoint.TXPOOL_CONTENT)
