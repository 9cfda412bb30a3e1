"""Allow running the CLI as ``python -m sdf_delay``."""

from sdf_delay.cli import main

main()
