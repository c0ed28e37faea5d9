"""Allow ``python -m prompt_router``."""
from __future__ import annotations

from prompt_router.cli.main import cli

if __name__ == "__main__":
    cli(prog_name="prompt-router")
