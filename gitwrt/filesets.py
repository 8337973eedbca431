"""
Router configuration categories and the files behind them.

Live paths are absolute OpenWrt paths; inside the backup repository each file
is stored at the same path relative to ``/`` (``/etc/config/network`` becomes
``etc/config/network``). The package list is generated rather than copied.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

PACKAGES_FILE = "packages.txt"


@dataclass(frozen=True)
class Category:
    name: str
    label: str
    paths: Tuple[str, ...]


CATEGORIES = [
    Category("network", "Network interfaces", ("/etc/config/network",)),
    Category("firewall", "Firewall rules", ("/etc/config/firewall",)),
    Category("dhcp", "DHCP and DNS", ("/etc/config/dhcp",)),
    Category("packages", "Installed package list", (PACKAGES_FILE,)),
    Category("wifi", "Wi-Fi networks and credentials", ("/etc/config/wireless",)),
    Category("system", "System settings", ("/etc/config/system", "/etc/rc.local", "/etc/sysupgrade.conf")),
    Category(
        "everything",
        "All of /etc/config plus the above",
        ("/etc/config", "/etc/rc.local", "/etc/sysupgrade.conf", "/etc/dropbear/authorized_keys", PACKAGES_FILE),
    ),
]

BY_NAME = {category.name: category for category in CATEGORIES}


def options() -> List[Tuple[str, str]]:
    return [(category.name, category.label) for category in CATEGORIES]


def resolve(names: Iterable[str]) -> List[str]:
    """Paths of the named categories, in category order, without repeats. Unknown names are ignored."""
    wanted = set(names)
    paths: List[str] = []
    for category in CATEGORIES:
        if category.name not in wanted:
            continue
        for path in category.paths:
            if path not in paths:
                paths.append(path)
    return paths


def repo_path(path: str) -> str:
    return path.lstrip("/")


def live_path(live_root: str, rel: str) -> str:
    return os.path.join(live_root, rel)


def live_files(paths: Iterable[str], live_root: str = "/") -> Iterator[Tuple[str, str]]:
    """Yield ``(live file, repository path)`` for every existing file under ``paths``."""
    for path in paths:
        if path == PACKAGES_FILE:
            continue
        source = live_path(live_root, repo_path(path))
        if os.path.isfile(source):
            yield source, repo_path(path)
        elif os.path.isdir(source):
            for current, dirs, files in os.walk(source):
                dirs.sort()
                for name in sorted(files):
                    full = os.path.join(current, name)
                    yield full, repo_path(path) + "/" + os.path.relpath(full, source).replace(os.sep, "/")
