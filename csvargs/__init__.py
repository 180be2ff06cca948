"""csvargs: run a shell command per CSV row, rendered from a Jinja2 template."""

__version__ = "0.1.0"
