#!/usr/bin/env python3
"""
Platform Detection and Utilities

Detects Windows, macOS, Linux and WSL to pick platform-specific paths:
the PowerShell executable that hosts the compliance session and the
default directory exported rule packages are written to.
"""

import os
import platform
import shutil
import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional

from config import POWERSHELL_CORE, POWERSHELL_WINDOWS


class Platform(Enum):
    """Supported platforms"""
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    WSL = "wsl"
    UNKNOWN = "unknown"


def _is_wsl() -> bool:
    """Check if running on Windows Subsystem for Linux"""
    try:
        with open('/proc/version', 'r') as f:
            version = f.read().lower()
            return 'microsoft' in version or 'wsl' in version
    except OSError:
        return False


def detect_platform(system: Optional[str] = None) -> Platform:
    """
    Detect the current platform

    Args:
        system: Override for platform.system(), used by tests
    """
    system = (system or platform.system()).lower()

    if system == "windows":
        return Platform.WINDOWS
    elif system == "darwin":
        return Platform.MACOS
    elif system == "linux":
        if _is_wsl():
            return Platform.WSL
        return Platform.LINUX
    return Platform.UNKNOWN


def find_powershell(current: Optional[Platform] = None) -> Optional[str]:
    """
    Locate a PowerShell executable.

    PowerShell 7 (pwsh) is preferred everywhere; Windows PowerShell is the
    fallback on Windows only, since the compliance module runs on both.

    Returns:
        Executable path, or None when nothing is installed
    """
    current = current or detect_platform()
    found = shutil.which(POWERSHELL_CORE)
    if found:
        return found
    if current == Platform.WINDOWS:
        return shutil.which(POWERSHELL_WINDOWS)
    return None


def _wsl_windows_profile() -> Optional[Path]:
    """Windows user profile as seen from WSL, e.g. /mnt/c/Users/alice"""
    try:
        result = subprocess.run(
            ['cmd.exe', '/c', 'echo %USERPROFILE%'],
            capture_output=True,
            text=True,
            timeout=5,
            stdin=subprocess.DEVNULL,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return None
    profile = result.stdout.strip()
    if result.returncode != 0 or len(profile) < 3 or profile[1] != ':':
        return None
    drive = profile[0].lower()
    rest = profile[2:].replace('\\', '/').lstrip('/')
    path = Path(f"/mnt/{drive}") / rest
    return path if path.is_dir() else None


def default_output_dir(current: Optional[Platform] = None, home: Optional[Path] = None) -> Path:
    """
    Directory exports go to when none was given.

    The user's Documents folder when it exists, otherwise the home directory.
    On WSL the Windows profile's Documents folder is used when reachable so
    exports land where Windows tools can open them.
    """
    current = current or detect_platform()
    home = home or Path.home()

    if current == Platform.WSL:
        profile = _wsl_windows_profile()
        if profile is not None and (profile / "Documents").is_dir():
            return profile / "Documents"

    if current == Platform.WINDOWS:
        user_profile = os.environ.get("USERPROFILE")
        if user_profile:
            home = Path(user_profile)

    documents = home / "Documents"
    if documents.is_dir():
        return documents
    return home
