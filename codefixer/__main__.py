"""Allows running the CLI with `python -m codefixer`."""

from codefixer.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
