# promptassembler/__init__.py
import os
from loguru import logger

__version__ = "0.3.0"

def _initialize_plugins():
    """Loads formatter plugins unless explicitly skipped."""
    # Allow skipping plugin loading for tests or specific environments
    if os.environ.get("PROMPTASSEMBLER_SKIP_PLUGINS", "0") == "1":
        logger.info("Skipping plugin loading due to PROMPTASSEMBLER_SKIP_PLUGINS=1.")
        return

    try:
        from .core.plugins import load_plugins
        load_plugins()
    except Exception:
        logger.exception("An unexpected error occurred during formatter plugin loading.")

_initialize_plugins()
