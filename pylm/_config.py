"""Backend configuration for pylm.

Controls which computational backend fits use when no ``backend=``
argument is passed.

Resolution order (first match wins):
    1. Programmatic override via :func:`set_default_backend`.
    2. The ``PYLM_BACKEND`` environment variable.
    3. ``"cpu"``.

Valid names are ``"auto"``, ``"cpu"``, ``"gpu"`` and ``"pytorch"``
(case-insensitive).

Examples:
    Select the GPU globally from the shell::

        export PYLM_BACKEND=gpu

    Or programmatically::

        import pylm
        pylm.set_default_backend("auto")
"""

from __future__ import annotations

import os

from .exceptions import InvalidArgumentError

VALID_BACKENDS = ("auto", "cpu", "gpu", "pytorch")
ENV_VAR = "PYLM_BACKEND"

_backend_override: str | None = None


def _normalize(name: str) -> str:
    key = name.strip().lower()
    if key not in VALID_BACKENDS:
        raise InvalidArgumentError(
            f"Unknown backend: '{name}'\n"
            f"Valid options: {', '.join(repr(b) for b in VALID_BACKENDS)}"
        )
    return key


def get_default_backend() -> str:
    """Return the backend name used when none is given explicitly."""
    if _backend_override is not None:
        return _backend_override

    env = os.environ.get(ENV_VAR, "").strip()
    if env:
        return _normalize(env)

    return "cpu"


def set_default_backend(name: str | None) -> None:
    """Override the default backend; ``None`` restores the resolution order."""
    global _backend_override
    _backend_override = None if name is None else _normalize(name)
