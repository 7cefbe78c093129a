"""
Control of a local IPFS daemon through its CLI and HTTP API
"""

import os
import json
import time
import logging
import subprocess
from typing import Optional
import requests

from ..errors import IpfsError

logger = logging.getLogger(__name__)


class IpfsNode:
    """
    An IPFS daemon bound to a private repository directory.

    The `ipfs` binary (kubo) must be installed; everything else goes
    through the daemon's HTTP API.
    """

    def __init__(self, repo_directory: str, binary: str = "ipfs", api_port: int = 5001,
                 gateway_port: int = 8080, swarm_port: int = 4001, api_url: Optional[str] = None):
        self.repo_directory = repo_directory
        self.binary = binary
        self.api_port = api_port
        self.gateway_port = gateway_port
        self.swarm_port = swarm_port
        self.api_url = (api_url or f"http://127.0.0.1:{api_port}").rstrip("/")
        self.process: Optional[subprocess.Popen] = None

    def _env(self):
        env = dict(os.environ)
        env["IPFS_PATH"] = self.repo_directory
        return env

    def _run(self, *args):
        try:
            subprocess.run([self.binary, *args], env=self._env(), check=True,
                           stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError:
            raise IpfsError(f"The IPFS binary '{self.binary}' is not installed")
        except subprocess.CalledProcessError as e:
            raise IpfsError(f"'{self.binary} {' '.join(args)}' failed: {e.stderr.decode(errors='replace')}")

    def initialize(self):
        """Creates the repository (once) and binds its addresses to the configured ports"""
        if not os.path.exists(os.path.join(self.repo_directory, "config")):
            logger.info(f"Initializing IPFS repository at {self.repo_directory}")
            self._run("init")

        addresses = {
            "Addresses.API": f"/ip4/127.0.0.1/tcp/{self.api_port}",
            "Addresses.Gateway": f"/ip4/127.0.0.1/tcp/{self.gateway_port}",
            "Addresses.Swarm": [f"/ip4/0.0.0.0/tcp/{self.swarm_port}", f"/ip6/::/tcp/{self.swarm_port}"],
        }
        for key, value in addresses.items():
            self._run("config", "--json", key, json.dumps(value))

    def is_running(self) -> bool:
        try:
            response = requests.post(f"{self.api_url}/api/v0/id", timeout=2)
            return response.ok
        except requests.exceptions.RequestException:
            return False

    def start(self, timeout: float = 30):
        """Launches the daemon and waits for its API"""
        try:
            self.process = subprocess.Popen([self.binary, "daemon"], env=self._env(),
                                            stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except FileNotFoundError:
            raise IpfsError(f"The IPFS binary '{self.binary}' is not installed")

        deadline = time.time() + timeout
        while time.time() < deadline:
            if self.process.poll() is not None:
                raise IpfsError(f"The IPFS daemon exited with code {self.process.returncode}")
            if self.is_running():
                logger.info(f"IPFS API at {self.api_url}, gateway at http://127.0.0.1:{self.gateway_port}")
                return
            time.sleep(0.5)

        self.stop()
        raise IpfsError(f"The IPFS daemon did not answer at {self.api_url} within {timeout} seconds")

    def add(self, relative_path: str, content: bytes) -> str:
        """
        Adds (and pins) a file

        Returns:
            The file's CID
        """
        response = requests.post(
            f"{self.api_url}/api/v0/add",
            params={'pin': 'true'},
            files={'file': (relative_path, content)},
            timeout=60
        )
        response.raise_for_status()
        return response.json()['Hash']

    def stop(self, timeout: float = 10):
        if self.process is None:
            return
        self.process.terminate()
        try:
            self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("IPFS daemon did not stop in time, killing it")
            self.process.kill()
            self.process.wait()
        self.process = None
