"""
Start a local anvil node, give an account 10 ether and read the balance back.

Requires the `anvil` executable from Foundry to be on the PATH.
"""
from __future__ import annotations
import asyncio
import logging
import aiohttp
from anvil_web3.api import Anvil, AnvilInstance


def enable_logging():
    stdio_handler = logging.StreamHandler()
    stdio_handler.setLevel(logging.DEBUG)
    stdio_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s - %(module)s:%(lineno)s %(message)s")
    )

    for name in ("anvil_web3.api", "anvil_web3.instance"):
        logger = logging.getLogger(name)
        logger.addHandler(stdio_handler)
        logger.setLevel(logging.DEBUG)


async def main():
    # enable_logging()
    address = "0x1000000000000000000000000000000000000000"

    async with AnvilInstance() as instance:
        async with aiohttp.ClientSession() as session:

            async def send(payload: dict) -> dict:
                async with session.post(instance.http_url, json=payload) as response:
                    return await response.json()

            anvil = Anvil(send)
            await anvil.set_balance(address, 10 * 10**18)
            balance = await anvil.make_request("eth_getBalance", address, "latest")
            print(f"Balance of {address}: {int(balance, 16) / 10**18} ETH")

            snapshot_id = await anvil.snapshot()
            await anvil.set_next_block_timestamp(4242424242)
            await anvil.mine(1)
            block = await anvil.make_request("eth_getBlockByNumber", "latest", False)
            print(f"Block timestamp: {int(block['timestamp'], 16)}")
            await anvil.revert(snapshot_id)


if __name__ == "__main__":
    asyncio.run(main())
