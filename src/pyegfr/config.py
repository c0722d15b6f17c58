"""Runtime defaults for formula evaluation.

Worker and chunk settings used when per-observation coefficient selection is
partitioned across threads.
Each value can be overridden through an environment variable; the source of
every resolved value is recorded so scripts can report it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence
import logging
import os

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class EgfrDefaults:
    workers: int
    chunk_size: int
    source: Dict[str, str]

    def as_map_kwargs(self) -> Dict[str, Any]:
        return {"workers": self.workers, "chunk_size": self.chunk_size}

_DEFAULT_ENV_KEYS: Dict[str, Sequence[str]] = {
    "workers": ("PYEGFR_WORKERS",),
    "chunk": ("PYEGFR_CHUNK_SIZE",),
}

_BUILTIN = {"workers": 1, "chunk": 10_000}

def resolve_defaults(
    env: Optional[Mapping[str, str]] = None,
    *,
    env_keys: Optional[Dict[str, Sequence[str]]] = None,
) -> EgfrDefaults:
    """Return evaluation defaults, honouring ``PYEGFR_*`` environment overrides."""

    env = dict(os.environ if env is None else env)
    merged_keys = {
        name: tuple(_dedupe_keys((env_keys or {}).get(name), _DEFAULT_ENV_KEYS.get(name)))
        for name in _DEFAULT_ENV_KEYS
    }

    values: Dict[str, int] = {}
    source: Dict[str, str] = {}
    for name, minimum in (("workers", 1), ("chunk", 1)):
        value, origin = _read_int(merged_keys[name], env, minimum=minimum)
        if value is None:
            value, origin = _BUILTIN[name], "default"
        values[name] = value
        source[name] = origin

    return EgfrDefaults(
        workers=values["workers"],
        chunk_size=values["chunk"],
        source=source,
    )

def _dedupe_keys(custom: Optional[Sequence[str]], defaults: Optional[Sequence[str]]) -> Sequence[str]:
    seen = set()
    ordered = []
    for key_list in (custom or []), (defaults or []):
        for key in key_list or []:
            if key and key not in seen:
                seen.add(key)
                ordered.append(key)
    return tuple(ordered)

def _read_int(
    keys: Sequence[str],
    env: Mapping[str, str],
    *,
    minimum: int,
) -> tuple[Optional[int], Optional[str]]:
    for key in keys:
        raw = env.get(key)
        if raw is None:
            continue
        try:
            value = int(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", key, raw)
            continue
        if value >= minimum:
            return value, f"env({key})"
        logger.warning("Ignoring %s=%r: must be >= %d", key, raw, minimum)
    return None, None
