# -*- coding: utf-8 -*-
"""
gitwrt - menu driven git tooling for OpenWrt routers
 - git-manager: select, inspect, commit, pull/push and branch local repositories
 - router-backup: snapshot router configuration into a git repository
"""

import os

# A missing git binary is reported by the prerequisite check, not at import time.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

__version__ = "0.2.0"
