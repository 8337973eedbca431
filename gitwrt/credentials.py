"""SSH key pair used to authenticate against GitHub."""

from __future__ import annotations

import os
from typing import Tuple

from .errors import CredentialError
from .shell import run_command

SSH_KEY_PATH = os.path.expanduser("~/.ssh/id_ed25519")
GITHUB_SSH_HOST = "git@github.com"
GITHUB_KEYS_URL = "https://github.com/settings/ssh/new"


class CredentialManager:
    def __init__(self, key_path: str = SSH_KEY_PATH, host: str = GITHUB_SSH_HOST) -> None:
        self.key_path = key_path
        self.host = host

    @property
    def public_key_path(self) -> str:
        return self.key_path + ".pub"

    def exists(self) -> bool:
        return os.path.isfile(self.key_path)

    def create(self) -> None:
        """Generate an ed25519 key pair without passphrase; never overwrites."""
        if self.exists():
            return
        os.makedirs(os.path.dirname(self.key_path), mode=0o700, exist_ok=True)
        result = run_command(["ssh-keygen", "-t", "ed25519", "-N", "", "-f", self.key_path, "-q"])
        if not result.ok or not self.exists():
            raise CredentialError(f"Failed to create SSH key at {self.key_path}: {result.output}")

    def public_key(self) -> str:
        with open(self.public_key_path) as handle:
            return handle.read().strip()

    def test_connection(self) -> Tuple[bool, str]:
        # GitHub closes the session with status 1 even when authentication succeeds
        result = run_command(
            ["ssh", "-T", "-o", "StrictHostKeyChecking=accept-new", "-o", "BatchMode=yes", self.host]
        )
        return "successfully authenticated" in result.output, result.output
