# promptassembler/config/paths.py
import os
from pathlib import Path

def _get_app_name() -> str:
    return "promptassembler"

def get_user_data_dir() -> Path:
    """Get the per-user data directory, honouring PROMPTASSEMBLER_HOME and XDG_CONFIG_HOME."""
    override = os.environ.get("PROMPTASSEMBLER_HOME")
    if override:
        path = Path(override).expanduser()
    else:
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg_config) if xdg_config else Path.home() / ".config"
        path = base / _get_app_name()

    path.mkdir(parents=True, exist_ok=True)
    return path

def get_user_config_file() -> Path:
    """Get the path to the user's config.json file."""
    return get_user_data_dir() / "config.json"

def get_user_log_dir() -> Path:
    """Get the path to the user's log directory."""
    path = get_user_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path

def get_workspace_config_path(workspace_root: Path) -> Path | None:
    """Get a project-local config file (.promptassembler.json) if the workspace has one."""
    config_path = workspace_root / ".promptassembler.json"
    if config_path.is_file():
        return config_path
    return None
