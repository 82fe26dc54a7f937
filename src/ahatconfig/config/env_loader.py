"""Environment mapping provider with optional .env support.

Builds the key/value mapping the environment source reads from, in
deterministic order:
1) .env file (if provided, else ./.env when it exists)
2) Process environment (``os.environ`` unless another mapping is given)
3) Explicit overrides (highest precedence)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values


class EnvLoader:
    """Load environment-style key/value pairs with .env support."""

    def __init__(
        self,
        env_file: Optional[Path | str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.env_file = Path(env_file) if env_file else None
        self._environ = environ

    @property
    def env_path(self) -> Path:
        return self.env_file or Path.cwd() / ".env"

    def load(self, overrides: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        """Load environment data.

        Precedence (low -> high): .env file, process env vars, overrides
        """
        data: Dict[str, str] = {}

        if self.env_path.is_file():
            file_values = dotenv_values(self.env_path)
            data.update({k: v for k, v in file_values.items() if v is not None})

        data.update(os.environ if self._environ is None else self._environ)

        if overrides:
            data.update({k: str(v) for k, v in overrides.items()})

        return data


__all__ = ["EnvLoader"]
