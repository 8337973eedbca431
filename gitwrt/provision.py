# -*- coding: utf-8 -*-
"""
Router provisioning: system packages, command links, then the git manager.
"""

from __future__ import annotations

import os
import shutil
import sys
from typing import Callable, List

from .logs import console, print_error, print_info, print_success, print_warning
from .shell import run_command
from .vcs import CommandResult

OPENWRT_RELEASE = "/etc/openwrt_release"
PACKAGES = ("git", "git-http", "whiptail", "openssh-client", "openssh-keygen")
COMMANDS = ("git-manager", "router-backup", "router-backup-run")
LINK_DIR = "/usr/bin"


def install_packages(runner: Callable[[List[str]], CommandResult] = run_command, packages=PACKAGES) -> bool:
    """Update the package list and install each package; False only when the update fails."""
    print_info("Updating package list...")
    if not runner(["opkg", "update"]).ok:
        print_error("Failed to update package list")
        return False
    print_success("Package list updated")

    print_info("Installing dependencies...")
    for pkg in packages:
        print_info(f"Installing {pkg}...")
        if runner(["opkg", "install", pkg]).ok:
            print_success(f"{pkg} installed")
        else:
            print_warning(f"{pkg} may already be installed or failed to install")
    return True


def link_commands(link_dir: str = LINK_DIR, commands=COMMANDS) -> List[str]:
    """Symlink installed console scripts into ``link_dir`` when they live elsewhere."""
    linked = []
    for name in commands:
        target = shutil.which(name)
        link = os.path.join(link_dir, name)
        if not target or os.path.exists(link) or os.path.islink(link):
            continue
        try:
            os.symlink(target, link)
        except OSError as e:
            print_warning(f"Could not link {link}: {e}")
            continue
        print_success(f"Created symbolic link: {link}")
        linked.append(link)
    return linked


def main() -> int:
    console.rule("[bold]OpenWrt Git Manager Installation[/bold]")
    if not os.path.isfile(OPENWRT_RELEASE):
        print_warning("This installer is designed for OpenWrt, but we'll continue anyway...")
    if not install_packages():
        return 1
    link_commands()
    console.rule()
    print_success("Installation complete!")
    console.print("You can now run:\n  git-manager\n  router-backup")
    print_info("Starting Git Manager for first-time setup...")
    manager = shutil.which("git-manager")
    if manager is None:
        print_error("git-manager is not on PATH")
        return 1
    os.execv(manager, [manager])
    return 0


if __name__ == "__main__":
    sys.exit(main())
