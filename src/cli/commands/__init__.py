"""CLI command modules.

- serve: run the webhook receiver
- sync: manual chart resolution, render and apply
- config: print the effective configuration
"""

from .config import app as config_app
from .serve import serve
from .sync import app as sync_app

__all__ = ["config_app", "serve", "sync_app"]
