from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from notion_shelf.core.icons import STATUS_ICONS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = "notion_shelf.yaml"


def _strip_inline_comment(val: str) -> str:
    in_single = False
    in_double = False
    for i, ch in enumerate(val):
        if ch == "'" and not in_double:
            in_single = not in_single
            continue
        if ch == '"' and not in_single:
            in_double = not in_double
            continue
        if ch == "#" and not in_single and not in_double:
            return val[:i].rstrip()
    return val.rstrip()


def _parse_env_file(path: Path) -> None:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("could not read %s: %s", path, e)
        return
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        k, v = line.split("=", 1)
        k = k.strip()
        v = _strip_inline_comment(v.strip())
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]
        if k and k not in os.environ:
            os.environ[k] = v


def load_dotenv(path: str = ".env") -> Optional[str]:
    """
    Loads environment variables from a .env file.

    Search order:
    1) ENV_PATH (if set)
    2) explicit `path` as provided (relative to CWD or absolute)
    3) project root (parent of the notion_shelf package directory)
    4) current working directory

    Variables already present in the environment are left alone.
    Returns the resolved .env path used, or None if not found.
    """
    override = os.getenv("ENV_PATH")
    candidates: List[Path] = []
    if override:
        candidates.append(Path(override).expanduser())

    p = Path(path).expanduser()
    candidates.append(p if p.is_absolute() else (Path.cwd() / p))

    project_root = Path(__file__).resolve().parent.parent
    candidates.append(project_root / ".env")

    candidates.append(Path.cwd() / ".env")

    seen = set()
    for c in candidates:
        c = c.resolve()
        if str(c) in seen:
            continue
        seen.add(str(c))
        if c.is_file():
            _parse_env_file(c)
            return str(c)

    return None


@dataclass
class PropertyNames:
    title: str = "Title"
    authors: str = "Author"
    isbn: str = "ISBN"
    total_pages: str = "Total Pages"
    status: str = "Status"


@dataclass
class Settings:
    properties: PropertyNames = field(default_factory=PropertyNames)
    status_icons: Dict[str, str] = field(default_factory=lambda: dict(STATUS_ICONS))
    icon_interval_s: float = 0.25
    pages_interval_s: float = 0.5
    import_interval_s: float = 1.0
    notion_rate_per_sec: float = 3.0
    notion_burst: int = 3


def _read_yaml(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError as e:
        raise SystemExit(f"Settings file not found: {path}") from e
    except (OSError, yaml.YAMLError) as e:
        raise SystemExit(f"Failed to read settings file: {path} ({e})") from e
    if not isinstance(data, dict):
        raise SystemExit(f"Settings file must contain a mapping: {path}")
    return data


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Read the optional YAML settings file.

    With no explicit path, `notion_shelf.yaml` in the CWD is used when it
    exists; otherwise defaults apply. Unknown keys are ignored.
    """
    settings = Settings()
    if path:
        src = Path(path).expanduser()
    else:
        src = Path.cwd() / DEFAULT_SETTINGS_FILE
        if not src.exists():
            return settings

    data = _read_yaml(src)
    logger.info("Loaded settings file: %s", src)

    props = data.get("properties") or {}
    if isinstance(props, dict):
        for f in fields(PropertyNames):
            if props.get(f.name):
                setattr(settings.properties, f.name, str(props[f.name]))

    icons = data.get("status_icons") or {}
    if isinstance(icons, dict):
        settings.status_icons.update({str(k): str(v) for k, v in icons.items() if v})

    for key in ("icon_interval_s", "pages_interval_s", "import_interval_s", "notion_rate_per_sec"):
        if data.get(key) is not None:
            setattr(settings, key, float(data[key]))
    if data.get("notion_burst") is not None:
        settings.notion_burst = int(data["notion_burst"])
    return settings


@dataclass
class AppConfig:
    notion_api_key: str
    notion_database_id: str
    timeout_s: float
    failed_dir: str
    settings: Settings

    @classmethod
    def from_env(cls, *, timeout_s: float, failed_dir: str, settings: Settings) -> "AppConfig":
        return cls(
            notion_api_key=(os.getenv("NOTION_API_KEY") or "").strip(),
            notion_database_id=(os.getenv("NOTION_DATABASE_ID") or "").strip(),
            timeout_s=timeout_s,
            failed_dir=failed_dir,
            settings=settings,
        )

    def validate(self) -> None:
        if not self.notion_api_key:
            raise SystemExit("Missing NOTION_API_KEY (set in .env or environment).")
        if not self.notion_database_id:
            raise SystemExit("Missing NOTION_DATABASE_ID (set in .env or environment).")
        if self.timeout_s <= 0:
            raise SystemExit("--timeout must be positive.")
