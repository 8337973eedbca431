"""
First-run setup.

Runs once, when a tool starts without a settings file. The steps are linear:
SSH key (create, show, test), GitHub username, storage directory, any
tool-specific steps, then the settings are written. Only a failure to create
the SSH key ends the program.
"""

from __future__ import annotations

import os
import socket

from . import filesets, schedule
from .credentials import GITHUB_KEYS_URL
from .errors import ConfigError, CredentialError
from .logs import log_action, print_error, print_success, print_warning
from .snapshots import BackupService

PLACEHOLDER_USERNAME = "user"


class FirstRunWizard:
    storage_label = "Repos Directory"
    storage_prompt = "Enter the directory for storing repositories:"

    def __init__(self, prompter, credentials, store, settings) -> None:
        self.prompter = prompter
        self.credentials = credentials
        self.store = store
        self.settings = settings

    def run(self):
        self.ensure_credential()
        self.collect_identity()
        self.collect_storage_root()
        self.extra_steps()
        self.finalize()
        return self.settings

    def ensure_credential(self) -> None:
        if self.credentials.exists():
            return
        self.prompter.message("First-Run Setup", "No SSH key found. We'll create one now.")
        try:
            self.credentials.create()
        except CredentialError:
            self.prompter.message("Error", "Failed to create SSH key.")
            raise
        print_success(f"SSH key created at {self.credentials.key_path}")
        log_action(f"Created SSH key {self.credentials.key_path}")

        pubkey = self.credentials.public_key()
        self.prompter.message(
            "SSH Public Key",
            f"Your SSH public key:\n\n{pubkey}\n\n"
            f"Please add this key to GitHub at:\n{GITHUB_KEYS_URL}\n\n"
            "Press OK when you've added the key.",
        )

        self.prompter.message("Testing Connection", "Now testing connection to GitHub...")
        ok, output = self.credentials.test_connection()
        if ok:
            self.prompter.message("Success", f"GitHub SSH connection successful!\n\n{output}")
        else:
            self.prompter.message(
                "Warning", f"GitHub SSH test result:\n\n{output}\n\nYou may need to add the key to GitHub."
            )
            print_warning("GitHub SSH test did not authenticate")

    def collect_identity(self) -> None:
        if self.settings.github_username:
            return
        username = self.prompter.text_input("GitHub Username", "Enter your GitHub username:")
        self.settings.github_username = PLACEHOLDER_USERNAME if username is None else username

    def collect_storage_root(self) -> None:
        answer = self.prompter.text_input(self.storage_label, self.storage_prompt, self.settings.storage_root)
        if answer:
            self.settings.storage_root = answer

    def extra_steps(self) -> None:
        pass

    def summary(self) -> str:
        return f"GitHub Username: {self.settings.github_username}\n{self.storage_label}: {self.settings.storage_root}"

    def finalize(self) -> None:
        try:
            os.makedirs(self.settings.storage_root, exist_ok=True)
        except OSError as e:
            print_warning(f"Could not create {self.settings.storage_root}: {e}")
        try:
            self.store.save(self.settings)
            print_success(f"Configuration saved to {self.store.path}")
        except ConfigError as e:
            print_error(str(e))
            self.prompter.message("Error", str(e))
        self.prompter.message("Setup Complete", f"First-run setup completed!\n\n{self.summary()}")


class BackupWizard(FirstRunWizard):
    storage_label = "Backup Directory"
    storage_prompt = "Enter the directory holding the backup repository:"

    def __init__(self, prompter, credentials, store, settings, service: BackupService) -> None:
        super().__init__(prompter, credentials, store, settings)
        self.service = service

    def extra_steps(self) -> None:
        default_name = self.settings.router_name
        if default_name == "openwrt":
            default_name = socket.gethostname() or default_name
        name = self.prompter.text_input("Router Name", "Enter a name for this router:", default_name)
        self.settings.router_name = name or default_name

        items = self.prompter.choose_many(
            "Backup Items", "Select what to back up (use SPACE to select):", filesets.options(), self.settings.item_names
        )
        if items:
            self.settings.item_names = items

        chosen = self.prompter.choose_one(
            "Backup Schedule", "How often should backups run?", schedule.options(), self.settings.schedule
        )
        if chosen:
            self.settings.schedule = chosen

    def summary(self) -> str:
        return (
            f"{super().summary()}\nRouter Name: {self.settings.router_name}\n"
            f"Backup Items: {self.settings.items}\nSchedule: {self.settings.schedule}"
        )

    def finalize(self) -> None:
        result = self.service.initialise()
        if not result.ok:
            print_warning(f"Backup repository not initialised: {result.output}")
        try:
            schedule.install(self.settings.schedule, self.service.crontab_path)
        except OSError as e:
            print_warning(f"Could not install backup schedule: {e}")
        super().finalize()
