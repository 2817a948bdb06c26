"""
Launch and manage a local Anvil node process.
"""
from __future__ import annotations
import aiohttp
import asyncio
import atexit
import socket
import subprocess
import time
from typing import Optional, Any
from anvil_web3 import instance_logger as logger
from anvil_web3.settings import settings


class AnvilStartupError(Exception):
    pass


def find_free_port(host: str = "127.0.0.1") -> int:
    """
    Ask the OS for a free TCP port on `host`.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))
        return s.getsockname()[1]


class AnvilInstance:
    """
    An `anvil` child process.

    Keyword arguments are turned into command line options of the `anvil` executable, e.g. `fork_url="http://.."`
    becomes `--fork-url http://..` and `no_mining=True` becomes `--no-mining`. Options set to None or False are
    omitted.

    Example:
        async with AnvilInstance(fork_url="https://eth.llamarpc.com") as instance:
            print(instance.http_url)
    """

    def __init__(
        self,
        suppress_output: Optional[bool] = None,
        liveness_timeout: Optional[float] = None,
        **config: Any,
    ):
        """
        Args:
            suppress_output: discard the process stdout and stderr. Defaults to `settings.anvil.suppress_output`.
            liveness_timeout: seconds to wait for the node to respond. Defaults to `settings.anvil.liveness_timeout`.
            **config: anvil command line options.
        """
        self.suppress_output = (
            settings.anvil.suppress_output if suppress_output is None else suppress_output
        )
        self.liveness_timeout = (
            settings.anvil.liveness_timeout
            if liveness_timeout is None
            else liveness_timeout
        )
        host = config.pop("host", None) or settings.anvil.host
        port = config.pop("port", None) or find_free_port(host)
        self.config: dict[str, Any] = {"host": host, "port": port}
        self.config.update(config)
        self.process: Optional[subprocess.Popen] = None

    @property
    def cli_args(self) -> list[str]:
        args = []
        for key, value in self.config.items():
            if value is None or value is False:
                continue
            flag = f"--{key.replace('_', '-')}"
            if value is True:
                args.append(flag)
            else:
                args.extend([flag, str(value)])
        return args

    @property
    def url(self) -> str:
        return f"{self.config['host']}:{self.config['port']}"

    @property
    def http_url(self) -> str:
        return f"http://{self.url}"

    @property
    def ws_url(self) -> str:
        return f"ws://{self.url}"

    def start(self) -> None:
        """
        Spawn the process. It is killed at interpreter exit if still running.
        """
        if self.process is not None:
            raise AnvilStartupError("Instance already started")
        cmd = [settings.anvil.executable] + self.cli_args
        logger.debug(f"Starting {' '.join(cmd)}")
        output = subprocess.DEVNULL if self.suppress_output else None
        self.process = subprocess.Popen(cmd, stdout=output, stderr=output)
        atexit.register(self.kill)

    def kill(self) -> None:
        """
        Terminate the process.
        """
        if self.process is None:
            return
        atexit.unregister(self.kill)
        if self.process.poll() is None:
            logger.debug(f"Stopping anvil on {self.url}")
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self.process.kill()
                self.process.wait()

    async def wait_until_live(self) -> None:
        """
        Poll the node until it answers a `web3_clientVersion` request.

        Raises:
            AnvilStartupError: if the process exited or the node did not respond within `liveness_timeout` seconds.
        """
        request = {
            "jsonrpc": "2.0",
            "id": 0,
            "method": "web3_clientVersion",
            "params": [],
        }
        end_time = time.monotonic() + self.liveness_timeout
        async with aiohttp.ClientSession() as session:
            while (remaining := end_time - time.monotonic()) > 0:
                if self.process is not None and self.process.poll() is not None:
                    raise AnvilStartupError(
                        f"anvil exited with code {self.process.returncode}"
                    )
                try:
                    # a single request may not outlive the liveness deadline
                    async with session.post(
                        self.http_url,
                        json=request,
                        timeout=aiohttp.ClientTimeout(total=remaining),
                    ) as response:
                        if response.status == 200:
                            logger.debug(f"anvil is live on {self.http_url}")
                            return
                except (aiohttp.ClientConnectionError, asyncio.TimeoutError):
                    logger.debug(f"Waiting for {self.http_url}")
                await asyncio.sleep(settings.anvil.poll_interval)

        raise AnvilStartupError(
            f"Unable to connect to {self.http_url} after {self.liveness_timeout} seconds."
        )

    async def __aenter__(self):
        self.start()
        try:
            await self.wait_until_live()
        except BaseException:
            self.kill()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.kill()
