"""Allow ``python -m csvargs``."""

from csvargs.cli import entry_point

entry_point()
