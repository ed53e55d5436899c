"""Allow running the CLI with `python -m whids_manager.cli`."""

from .main import main

main()
