"""Engine options and their environment defaults."""

import os
from dataclasses import dataclass
from typing import Optional


# Seconds to wait after a lone ESC before deciding it is the Escape key and
# not the start of an escape sequence.
ESCAPE_TIMEOUT = 0.05
# Inactivity after which the select type-ahead buffer is cleared.
SEARCH_TIMEOUT = 0.5
# How often keystrokes are polled while an async validator is pending.
VALIDATION_POLL = 0.02


def _env_flag(name: str) -> bool:
    value = os.getenv(name)
    return value is not None and value.strip().lower() not in {"", "0", "false", "no"}


@dataclass
class EngineOptions:
    """Capabilities and timings threaded through prompts and renderers."""

    color: bool = True
    ascii: bool = False
    columns: Optional[int] = None
    escape_timeout: float = ESCAPE_TIMEOUT
    search_timeout: float = SEARCH_TIMEOUT
    validation_poll: float = VALIDATION_POLL
    debug: bool = False

    @classmethod
    def from_env(cls, **overrides) -> "EngineOptions":
        """Build options from ``NO_COLOR``, ``PROMPT_CLI_ASCII`` and
        ``PROMPT_CLI_DEBUG``; keyword arguments win over the environment."""
        values = {
            "color": os.getenv("NO_COLOR") is None,
            "ascii": os.name == "nt" or _env_flag("PROMPT_CLI_ASCII"),
            "debug": _env_flag("PROMPT_CLI_DEBUG"),
        }
        values.update(overrides)
        return cls(**values)
