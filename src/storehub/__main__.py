"""Allow ``python -m storehub``."""

from storehub.cli import app

app()
