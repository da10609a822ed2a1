import os
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from surfer.domain.config import DEFAULT_USER_AGENT, BrowserConfig, Config

CONFIG_FILENAME = "surfer.yaml"


def find_config_path() -> str:
    """Find the most appropriate surfer.yaml path.

    Order of precedence:
    1. CONFIG_PATH environment variable (must point at an existing file)
    2. ./surfer.yaml in the current working directory
    3. surfer.yaml in any parent of the current working directory
    4. surfer.yaml next to the package (running from a source tree)

    Raises FileNotFoundError if no config file is found.
    """
    env_config_path = os.getenv("CONFIG_PATH")
    if env_config_path:
        path = Path(env_config_path)
        if path.is_file():
            return str(path)
        raise FileNotFoundError(f"CONFIG_PATH is set but file not found: {env_config_path}")

    p = Path.cwd()
    for parent in (p, *p.parents):
        candidate = parent / CONFIG_FILENAME
        if candidate.is_file():
            return str(candidate)

    package_config = Path(__file__).resolve().parents[2] / CONFIG_FILENAME
    if package_config.is_file():
        return str(package_config)

    raise FileNotFoundError(
        f"{CONFIG_FILENAME} not found. Set CONFIG_PATH, or place {CONFIG_FILENAME} in the current working "
        "directory or a parent directory."
    )


def load(config_path: Optional[str] = None) -> Config:
    file = _find_config(config_path)
    data = _read_config(file)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Parsed config file {file} does not contain a mapping")

    return _map_to_domain(data)


def _read_config(file: Path) -> Any:
    content = file.read_text(encoding="utf-8")

    def replace_env_var(match: re.Match) -> str:
        var_name = match.group(1)
        return os.getenv(var_name, match.group(0))

    content = re.sub(r'\$\{(\w+)}', replace_env_var, content)

    return yaml.safe_load(content)


def _find_config(config_path: str | None) -> Path:
    load_dotenv()

    if config_path:
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return path
    return Path(find_config_path())


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _map_to_domain(data: dict) -> Config:
    browser_data = data.get('browser') or {}
    attributes = browser_data.get('attributes') or {}
    auth = browser_data.get('auth') or {}

    browser_config = BrowserConfig(
        user_agent=str(browser_data.get('user-agent', DEFAULT_USER_AGENT)),
        send_referer=bool(attributes.get('send-referer', True)),
        meta_refresh_handling=bool(attributes.get('meta-refresh', True)),
        follow_redirects=bool(attributes.get('follow-redirects', True)),
        headers={str(name): str(value) for name, value in (browser_data.get('headers') or {}).items()},
        timeout=_optional_float(browser_data.get('timeout', 30)),
        max_redirects=int(browser_data.get('max-redirects', 30)),
        username=auth.get('username') or None,
        password=auth.get('password') or None,
    )

    return Config(
        log_level=str(data.get('log_level', 'INFO')),
        browser_config=browser_config,
    )
