"""
Settings records and the flat KEY="value" settings file.

Each tool keeps one settings file. The file is read at every start; when it is
absent the defaults are used in memory and the caller runs first-time setup.
Saving always rewrites every key of the record.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, asdict
from typing import Dict, List, Tuple, Type, TypeVar

from dotenv import dotenv_values

from .errors import ConfigError

MANAGER_CONFIG = os.path.expanduser("~/.gitmanager.conf")
BACKUP_CONFIG = os.path.expanduser("~/.routerbackup.conf")

DEFAULT_REPOS_DIR = "/root/repos"
DEFAULT_BACKUP_DIR = "/root/router-backup"


def _key(name: str, default: str = ""):
    return field(default=default, metadata={"key": name})


@dataclass
class ManagerSettings:
    github_username: str = _key("GITHUB_USERNAME")
    repos_dir: str = _key("REPOS_DIR", DEFAULT_REPOS_DIR)
    action_log: str = _key("ACTION_LOG")

    @property
    def storage_root(self) -> str:
        return self.repos_dir

    @storage_root.setter
    def storage_root(self, value: str) -> None:
        self.repos_dir = value


@dataclass
class BackupSettings:
    github_username: str = _key("GITHUB_USERNAME")
    backup_dir: str = _key("BACKUP_DIR", DEFAULT_BACKUP_DIR)
    router_name: str = _key("ROUTER_NAME", "openwrt")
    schedule: str = _key("BACKUP_SCHEDULE", "daily")
    items: str = _key("BACKUP_ITEMS", "network,firewall,dhcp,system")
    action_log: str = _key("ACTION_LOG")

    @property
    def storage_root(self) -> str:
        return self.backup_dir

    @storage_root.setter
    def storage_root(self, value: str) -> None:
        self.backup_dir = value

    @property
    def item_names(self) -> List[str]:
        return [name.strip() for name in self.items.split(",") if name.strip()]

    @item_names.setter
    def item_names(self, names: List[str]) -> None:
        self.items = ",".join(names)


S = TypeVar("S", ManagerSettings, BackupSettings)


def settings_keys(settings_cls: Type[S]) -> Dict[str, str]:
    """Map file keys to dataclass attribute names."""
    return {f.metadata["key"]: f.name for f in fields(settings_cls)}


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


class SettingsStore:
    """Loads and saves one settings record at ``path``."""

    def __init__(self, path: str, settings_cls: Type[S]) -> None:
        self.path = os.path.expanduser(path)
        self.settings_cls = settings_cls

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def load(self) -> Tuple[S, bool]:
        """Return ``(settings, found)``; defaults and ``found=False`` when there is no file."""
        settings = self.settings_cls()
        if not self.exists():
            return settings, False
        try:
            values = dotenv_values(self.path, interpolate=False)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read {self.path}: {e}") from e
        for key, attr in settings_keys(self.settings_cls).items():
            value = values.get(key)
            if value is not None:
                setattr(settings, attr, value)
        return settings, True

    def save(self, settings: S) -> None:
        record = asdict(settings)
        lines = [f"{key}={_quote(record[attr])}" for key, attr in settings_keys(type(settings)).items()]
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w") as handle:
                handle.write("\n".join(lines) + "\n")
        except OSError as e:
            raise ConfigError(f"Cannot write {self.path}: {e}") from e
