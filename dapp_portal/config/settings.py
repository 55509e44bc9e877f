"""
Runtime configuration for the dapp portal server.
Resolved once at startup from .env, the process environment and CLI flags.
"""

import argparse
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_PORT = 8000
DEFAULT_HOST = "0.0.0.0"
DEFAULT_EXPLORER_HOST = "explorer.example.com"
EXPLORER_BASE_PATH = "/explorer/api"
PROXY_PREFIX = "/explorer-api/"

INDEX_FILE = "index.html"
DAPPS_FILE = "dapps.json"
LOCAL_DAPPS_FILE = "dapps.local.json"


@dataclass(frozen=True)
class Settings:
    """Immutable server configuration handed to the app factory."""

    index_path: Path
    dapps_path: Path
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    explorer_host: str = DEFAULT_EXPLORER_HOST
    explorer_base_path: str = EXPLORER_BASE_PATH
    proxy_prefix: str = PROXY_PREFIX
    log_level: str = "info"


def parse_port(raw: Optional[str]) -> int:
    """Parse PORT; empty, non-numeric or zero values fall back to the default."""
    try:
        port = int((raw or "").strip())
    except ValueError:
        return DEFAULT_PORT
    return port if port > 0 else DEFAULT_PORT


def resolve_dapps_path(
    environ: Mapping[str, str], use_local: bool = False, root: Path = PROJECT_ROOT
) -> Path:
    """
    Pick the JSON config file to serve.
    Priority: --local (only if dapps.local.json exists) > DAPPS_PATH > dapps.json
    """
    default = root / DAPPS_FILE
    if use_local:
        local = root / LOCAL_DAPPS_FILE
        if local.is_file():
            return local
        logger.warning(f"--local given but {local} not found, ignoring")

    override = (environ.get("DAPPS_PATH") or "").strip()
    if override:
        path = Path(override)
        return path if path.is_absolute() else root / path
    return default


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the dapp portal and explorer proxy")
    parser.add_argument(
        "--local",
        action="store_true",
        help=f"Serve {LOCAL_DAPPS_FILE} instead of {DAPPS_FILE} when it exists",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file (default: .env in the project root)",
    )
    return parser


def load_env_file(env_file: Optional[str] = None, root: Path = PROJECT_ROOT) -> bool:
    """
    Load KEY=VALUE pairs from a .env file without overriding variables
    already present in the environment. Returns True if a file was loaded.
    """
    path = Path(env_file) if env_file else root / ".env"
    if not path.is_file():
        if env_file:
            logger.warning(f"Env file {path} not found, using process environment only")
        return False
    return load_dotenv(path, override=False)


def load_settings(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    root: Path = PROJECT_ROOT,
) -> Settings:
    """
    Build Settings from CLI args and the environment.

    When `environ` is omitted, the .env file is loaded into os.environ first
    and os.environ is used.
    """
    args = build_parser().parse_args(argv)
    if environ is None:
        load_env_file(args.env_file, root=root)
        environ = os.environ

    return Settings(
        index_path=root / INDEX_FILE,
        dapps_path=resolve_dapps_path(environ, use_local=args.local, root=root),
        port=parse_port(environ.get("PORT")),
        explorer_host=(environ.get("EXPLORER_HOST") or "").strip() or DEFAULT_EXPLORER_HOST,
        log_level=(environ.get("LOG_LEVEL") or "info").strip().lower() or "info",
    )


if __name__ == "__main__":
    # Debug: print resolved configuration
    print(load_settings())
