"""
System Facts
=============
Collects facts about the local host so the model proposes commands that
fit it (package manager, init system, shell, available tools).

The facts are cached as JSON in ~/.aiassist/sysinfo.json and become the
first, unlabeled entry of the conversation history.
"""

from __future__ import annotations

import getpass
import logging
import os
import platform
import shutil
import socket
import subprocess
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from aiassist.config_loader import DEFAULT_CONFIG_DIR

logger = logging.getLogger(__name__)

SYSINFO_FILE = DEFAULT_CONFIG_DIR / "sysinfo.json"

_CHECK_TIMEOUT: float = 5.0

_KNOWN_TOOLS: tuple[str, ...] = (
    "docker", "git", "curl", "wget", "kubectl", "helm", "terraform", "ansible",
)

# /etc/os-release ID → package manager
_PACKAGE_MANAGERS: dict[str, str] = {
    "ubuntu": "apt",
    "debian": "apt",
    "linuxmint": "apt",
    "arch": "pacman",
    "manjaro": "pacman",
    "alpine": "apk",
    "opensuse": "zypper",
}


class SystemInfo(BaseModel):
    """Environment facts about the host."""
    os: str = ""
    os_name: str = ""
    os_version: str = ""
    arch: str = ""
    shell: str = ""
    shell_version: str = ""
    hostname: str = ""
    kernel: str = ""
    package_manager: str = ""
    init_system: str = ""
    is_container: bool = False
    has_sudo: bool = False
    user: str = ""
    home_dir: str = ""
    python_version: str = ""
    available_tools: list[str] = Field(default_factory=list)

    def format_as_context(self) -> str:
        """Render the facts as the system entry of the conversation."""
        lines = ["[System Environment]", f"OS: {self.os_name} ({self.os})"]
        if self.os_version:
            lines.append(f"Version: {self.os_version}")
        lines.append(f"Architecture: {self.arch}")
        if self.user:
            lines.append(f"User: {self.user}" + (" (has sudo)" if self.has_sudo else ""))
        if self.shell:
            shell = self.shell
            if self.shell_version:
                shell += f" ({self.shell_version})"
            lines.append(f"Shell: {shell}")
        if self.package_manager:
            lines.append(f"Package Manager: {self.package_manager}")
        if self.init_system:
            lines.append(f"Init System: {self.init_system}")
        if self.python_version:
            lines.append(f"Python: {self.python_version}")
        if self.is_container:
            lines.append("Environment: Container")
        if self.available_tools:
            lines.append(f"Available Tools: {', '.join(self.available_tools)}")
        if self.kernel:
            lines.append(f"Kernel: {self.kernel}")
        if self.hostname:
            lines.append(f"Hostname: {self.hostname}")
        return "\n".join(lines) + "\n"


# ============================================================
#  CACHE
# ============================================================

def load_or_collect(path: Path = SYSINFO_FILE) -> SystemInfo:
    """Load cached facts, collecting and caching them on first use."""
    if path.exists():
        try:
            return SystemInfo.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("Ignoring unreadable sysinfo cache %s: %s", path, exc)
    return refresh(path)


def refresh(path: Path = SYSINFO_FILE) -> SystemInfo:
    """Collect facts now and overwrite the cache."""
    info = collect()
    save(info, path)
    return info


def save(info: SystemInfo, path: Path = SYSINFO_FILE) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(info.model_dump_json(indent=2), encoding="utf-8")
    logger.info("System info cached at %s", path)


# ============================================================
#  COLLECTION
# ============================================================

def collect() -> SystemInfo:
    """Inspect the host. Individual check failures leave their field empty."""
    info = SystemInfo(
        os=platform.system().lower(),
        arch=platform.machine(),
        hostname=socket.gethostname(),
        home_dir=str(Path.home()),
        user=os.environ.get("USER") or _current_user(),
        is_container=_detect_container(),
        has_sudo=_run(["sudo", "-n", "true"]) is not None,
    )

    if info.os == "linux":
        _collect_linux(info)
    elif info.os == "darwin":
        info.os_name = "macOS"
        info.package_manager = "brew"
        info.init_system = "launchd"
        info.os_version = _run(["sw_vers", "-productVersion"]) or ""
        info.kernel = platform.release()
    elif info.os == "windows":
        info.os_name = "Windows"
        info.os_version = platform.version()

    shell = os.environ.get("SHELL", "")
    if shell:
        info.shell = Path(shell).name
        version = _run([shell, "--version"])
        if version:
            info.shell_version = version.splitlines()[0].strip()

    info.python_version = _run(["python3", "--version"]) or _run(["python", "--version"]) or ""
    info.available_tools = [tool for tool in _KNOWN_TOOLS if shutil.which(tool)]

    logger.info("Collected system info: %s %s (%s)", info.os_name, info.os_version, info.arch)
    return info


def _collect_linux(info: SystemInfo) -> None:
    release = _read_os_release()
    info.os_name = release.get("NAME", "")
    info.os_version = release.get("VERSION", "")
    info.package_manager = _detect_package_manager(release.get("ID", ""))
    info.kernel = platform.release()

    if _run(["systemctl", "--version"]) is not None:
        info.init_system = "systemd"
    elif Path("/sbin/init").exists():
        info.init_system = "sysvinit"


def _read_os_release() -> dict[str, str]:
    try:
        text = Path("/etc/os-release").read_text(encoding="utf-8")
    except OSError:
        return {}
    values: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            values[key.strip()] = value.strip().strip('"')
    return values


def _detect_package_manager(distro_id: str) -> str:
    if distro_id in ("centos", "rhel", "fedora"):
        return "dnf" if shutil.which("dnf") else "yum"
    return _PACKAGE_MANAGERS.get(distro_id, "")


def _detect_container() -> bool:
    if Path("/.dockerenv").exists():
        return True
    try:
        cgroup = Path("/proc/1/cgroup").read_text(encoding="utf-8")
    except OSError:
        return False
    return any(marker in cgroup for marker in ("docker", "lxc", "kubepods"))


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def _run(argv: list[str]) -> str | None:
    """Run a host check; stripped stdout on exit 0, None otherwise."""
    try:
        completed = subprocess.run(
            argv, capture_output=True, text=True, timeout=_CHECK_TIMEOUT, check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout.strip()
