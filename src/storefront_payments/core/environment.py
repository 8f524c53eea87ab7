"""
Collects ``STOREFRONT_*`` settings from the process environment and ``.env`` files.

Only keys with the :data:`SETTINGS_PREFIX` are kept, so the resolved mapping
can be handed straight to :meth:`CheckoutConfig.from_mapping` or logged
without leaking unrelated variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

SETTINGS_PREFIX = "STOREFRONT_"


def _parse_line(raw_line: str) -> Optional[Tuple[str, str]]:
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, value = (part.strip() for part in line.split("=", 1))
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return key, value[1:-1]
    # Unquoted values may carry a trailing comment.
    value, _, _ = value.partition(" #")
    return key, value.rstrip()


def read_settings_file(path: Path) -> Optional[Dict[str, str]]:
    """Return the checkout settings in ``path``, or ``None`` if it does not exist."""
    try:
        data = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    settings: Dict[str, str] = {}
    for raw_line in data.splitlines():
        parsed = _parse_line(raw_line)
        if parsed is not None and parsed[0].startswith(SETTINGS_PREFIX):
            settings[parsed[0]] = parsed[1]
    return settings


@dataclass(frozen=True)
class CheckoutEnvironment:
    variables: Mapping[str, str]
    # The .env file that contributed values, if one was found.
    source: Optional[Path] = None

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.variables.get(key, default)


def build_environment(
    *,
    env_file: Optional[str] = ".env",
    base: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, str]] = None,
) -> CheckoutEnvironment:
    """
    Resolve checkout settings from ``base`` (default :data:`os.environ`),
    ``env_file`` and ``overrides``.

    The file only fills keys missing from ``base``; ``overrides`` always win.
    Pass ``env_file=None`` to skip the file.
    """
    source = os.environ if base is None else base
    merged = {key: value for key, value in source.items() if key.startswith(SETTINGS_PREFIX)}

    loaded_from: Optional[Path] = None
    if env_file is not None:
        path = Path(env_file)
        file_settings = read_settings_file(path)
        if file_settings is not None:
            loaded_from = path
            logging.debug("Read %d checkout settings from %s", len(file_settings), path)
            for key, value in file_settings.items():
                merged.setdefault(key, value)

    if overrides:
        merged.update(overrides)

    return CheckoutEnvironment(variables=merged, source=loaded_from)
