"""
Configuration for remotebatch
"""
import os
from pathlib import Path
from typing import Optional

# ══════════════════════════════════════════════════════════════════════════════
#  DEFAULTS  ── overridden by YAML config or apply_profile()
# ══════════════════════════════════════════════════════════════════════════════

PROTOCOL = "sftp"  # sftp | ftp | ftps
HOST = "example.com"
PORT = 22
USER = "root"
# Path to your private key, or None to use ssh-agent / ~/.ssh/id_* (sftp only)
KEY_PATH: Optional[str] = None
PASSWORD: Optional[str] = None

# Directory the cursor starts in; None keeps the login directory
REMOTE_ROOT: Optional[str] = None
# Relative local paths in get/put/append are resolved against this
LOCAL_ROOT = Path(".")

# Connect timeout (seconds)
TIMEOUT = 20

# FTP data connections in passive mode
PASSIVE = True

# Propagate the first failing command instead of capturing it in the result
THROWING = True

DEFAULT_PORTS = {"sftp": 22, "ftp": 21, "ftps": 21}

PROJECT_FILE = ".remotebatch"


# ══════════════════════════════════════════════════════════════════════════════
#  GLOBAL CONFIG FILE  ── $XDG_CONFIG_HOME/remotebatch/config.yaml
# ══════════════════════════════════════════════════════════════════════════════

def get_global_config_dir() -> Path:
    """Return the global config directory for remotebatch."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "remotebatch"
    if os.name == "nt":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "remotebatch"
    return Path.home() / ".config" / "remotebatch"


def load_global_config() -> dict:
    """Load global config from the remotebatch config directory."""
    import yaml

    cfg_path = get_global_config_dir() / "config.yaml"
    if not cfg_path.is_file():
        return {}
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}


# ══════════════════════════════════════════════════════════════════════════════
#  PROJECT CONFIG FILE  ── .remotebatch (searched upward)
# ══════════════════════════════════════════════════════════════════════════════

def find_project_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search upward from *start* (default: cwd) for a .remotebatch YAML file.
    Returns the Path if found, or None if no .remotebatch exists in any parent.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / PROJECT_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_project_file(path: Path) -> dict:
    """Parse a .remotebatch YAML file and return its contents as a dict."""
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_profile(data: dict, profile_name: str = "default") -> dict:
    """
    Extract a named profile from a .remotebatch or config.yaml data dict.
    Falls back to the first profile if the named one is not found.
    Returns a flat profile dict merged with top-level defaults.
    """
    defaults = data.get("defaults", {})
    profiles = data.get("profiles", [])
    if not profiles:
        return defaults.copy()
    profile = next((p for p in profiles if p.get("name") == profile_name), None)
    if profile is None:
        profile = profiles[0]
    merged = defaults.copy()
    merged.update(profile)
    return merged


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


# ══════════════════════════════════════════════════════════════════════════════
#  APPLY PROFILE  ── mutates module-level variables
# ══════════════════════════════════════════════════════════════════════════════

def apply_profile(profile: dict):
    """
    Apply a profile dict to the module-level config variables.
    Supports keys: protocol, server, port, user, ssh_key, password,
                   local_root, remote_root, base_remote (prepended to
                   remote_root if remote_root is relative), timeout,
                   passive, throwing.
    """
    global PROTOCOL, HOST, PORT, USER, KEY_PATH, PASSWORD
    global REMOTE_ROOT, LOCAL_ROOT, TIMEOUT, PASSIVE, THROWING

    if "protocol" in profile:
        protocol = str(profile["protocol"]).lower()
        if protocol not in DEFAULT_PORTS:
            raise ValueError(f"unsupported protocol in profile: {protocol!r}")
        PROTOCOL = protocol
        if "port" not in profile:
            PORT = DEFAULT_PORTS[protocol]
    if "server" in profile:
        HOST = str(profile["server"])
    if "port" in profile:
        PORT = int(profile["port"])
    if "user" in profile:
        USER = str(profile["user"])
    elif "username" in profile:
        USER = str(profile["username"])
    if "ssh_key" in profile:
        KEY_PATH = str(profile["ssh_key"]) if profile["ssh_key"] else None
    if "password" in profile:
        PASSWORD = str(profile["password"]) if profile["password"] else None
    if "local_root" in profile:
        LOCAL_ROOT = Path(profile["local_root"]).expanduser().resolve()
    if "remote_root" in profile:
        rr = str(profile["remote_root"])
        base = str(profile.get("base_remote", "")).rstrip("/")
        if base and not rr.startswith("/"):
            rr = f"{base}/{rr}"
        REMOTE_ROOT = rr or None
    if "timeout" in profile:
        TIMEOUT = int(profile["timeout"])
    if "passive" in profile:
        PASSIVE = _as_bool(profile["passive"])
    if "throwing" in profile:
        THROWING = _as_bool(profile["throwing"])
