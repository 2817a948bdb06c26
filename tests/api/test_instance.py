import asyncio
import unittest
import aiohttp
import subprocess
from unittest import mock
from aioresponses import aioresponses
from anvil_web3.api import instance
from anvil_web3.api.instance import AnvilInstance, AnvilStartupError
from anvil_web3.settings import settings


class AnvilInstanceConfigTest(unittest.TestCase):
    def tearDown(self) -> None:
        settings.reset_settings_to_default()

    def test_defaults(self):
        with mock.patch.object(instance, "find_free_port", return_value=8545):
            x = AnvilInstance()
        self.assertEqual("127.0.0.1:8545", x.url)
        self.assertEqual("http://127.0.0.1:8545", x.http_url)
        self.assertEqual("ws://127.0.0.1:8545", x.ws_url)
        self.assertTrue(x.suppress_output)
        self.assertEqual(60, x.liveness_timeout)

    def test_defaults_from_settings(self):
        settings.anvil.host = "0.0.0.0"
        settings.anvil.suppress_output = False
        x = AnvilInstance(port=1234, liveness_timeout=5)
        self.assertEqual("0.0.0.0:1234", x.url)
        self.assertFalse(x.suppress_output)
        self.assertEqual(5, x.liveness_timeout)

    def test_defaults_after_partial_register(self):
        settings.register({"anvil": {"executable": "/opt/anvil"}})
        x = AnvilInstance(port=8545)
        self.assertEqual("127.0.0.1:8545", x.url)
        self.assertTrue(x.suppress_output)
        self.assertEqual(60, x.liveness_timeout)

    def test_cli_args(self):
        x = AnvilInstance(
            host="localhost",
            port=8545,
            fork_url="https://eth.llamarpc.com",
            fork_block_number=19000000,
            no_mining=True,
            steps_tracing=False,
            accounts=None,
        )
        self.assertEqual(
            [
                "--host",
                "localhost",
                "--port",
                "8545",
                "--fork-url",
                "https://eth.llamarpc.com",
                "--fork-block-number",
                "19000000",
                "--no-mining",
            ],
            x.cli_args,
        )

    def test_find_free_port(self):
        port = instance.find_free_port()
        self.assertIsInstance(port, int)
        self.assertGreater(port, 0)

    @mock.patch("anvil_web3.api.instance.subprocess.Popen")
    def test_start_and_kill(self, mocked_popen):
        process = mocked_popen.return_value
        process.poll.return_value = None

        x = AnvilInstance(port=8545)
        x.start()
        mocked_popen.assert_called_once_with(
            ["anvil", "--host", "127.0.0.1", "--port", "8545"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )

        with self.assertRaises(AnvilStartupError) as context:
            x.start()
        self.assertEqual("Instance already started", str(context.exception))

        x.kill()
        process.terminate.assert_called_once()
        process.wait.assert_called_once_with(timeout=5)

    @mock.patch("anvil_web3.api.instance.subprocess.Popen")
    def test_kill_escalates(self, mocked_popen):
        process = mocked_popen.return_value
        process.poll.return_value = None
        process.wait.side_effect = [subprocess.TimeoutExpired("anvil", 5), 0]

        x = AnvilInstance(port=8545)
        x.start()
        x.kill()
        process.kill.assert_called_once()

    def test_kill_not_started(self):
        # no-op
        AnvilInstance(port=8545).kill()


class AnvilInstanceLivenessTest(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        settings.anvil.poll_interval = 0
        self.helper = aioresponses()
        self.helper.start()
        self.instance = AnvilInstance(host="127.0.0.1", port=8545)

    async def asyncTearDown(self) -> None:
        self.helper.stop()
        settings.reset_settings_to_default()

    async def test_wait_until_live(self):
        self.helper.post(
            self.instance.http_url, exception=aiohttp.ClientConnectionError()
        )
        self.helper.post(
            self.instance.http_url,
            payload={"jsonrpc": "2.0", "id": 0, "result": "anvil/v0.2.0"},
        )
        await self.instance.wait_until_live()

    async def test_wait_until_live_retries_stalled_request(self):
        self.helper.post(self.instance.http_url, exception=asyncio.TimeoutError())
        self.helper.post(
            self.instance.http_url,
            payload={"jsonrpc": "2.0", "id": 0, "result": "anvil/v0.2.0"},
        )
        await self.instance.wait_until_live()

        calls = [call for calls in self.helper.requests.values() for call in calls]
        self.assertEqual(2, len(calls))
        for call in calls:
            timeout = call.kwargs["timeout"]
            self.assertIsInstance(timeout, aiohttp.ClientTimeout)
            self.assertLessEqual(timeout.total, self.instance.liveness_timeout)

    async def test_wait_until_live_timeout(self):
        self.instance.liveness_timeout = 0
        with self.assertRaises(AnvilStartupError) as context:
            await self.instance.wait_until_live()
        self.assertEqual(
            "Unable to connect to http://127.0.0.1:8545 after 0 seconds.",
            str(context.exception),
        )

    async def test_wait_until_live_process_exited(self):
        self.instance.process = mock.MagicMock()
        self.instance.process.poll.return_value = 1
        self.instance.process.returncode = 1
        with self.assertRaises(AnvilStartupError) as context:
            await self.instance.wait_until_live()
        self.assertEqual("anvil exited with code 1", str(context.exception))

    @mock.patch("anvil_web3.api.instance.subprocess.Popen")
    async def test_context_manager(self, mocked_popen):
        process = mocked_popen.return_value
        process.poll.return_value = None
        self.helper.post(
            self.instance.http_url,
            payload={"jsonrpc": "2.0", "id": 0, "result": "anvil/v0.2.0"},
        )
        async with self.instance as x:
            self.assertIs(self.instance, x)
            mocked_popen.assert_called_once()
        process.terminate.assert_called_once()

    @mock.patch("anvil_web3.api.instance.subprocess.Popen")
    async def test_context_manager_kills_on_failure(self, mocked_popen):
        process = mocked_popen.return_value
        process.poll.return_value = None
        self.instance.liveness_timeout = 0
        with self.assertRaises(AnvilStartupError):
            async with self.instance:
                pass
        process.terminate.assert_called_once()
