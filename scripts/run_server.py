#!/usr/bin/env python3
"""Start the color relay server. Reads config (argument, COLOR_RELAY_CONFIG or config/config.yaml) and DATABASE_URL.

Usage:
  python scripts/run_server.py [CONFIG]

Exits with status 1 when the store backend is postgres and DATABASE_URL is not set.
"""

import logging
import os
import sys

# Project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _PROJECT_ROOT)
os.chdir(_PROJECT_ROOT)

logger = logging.getLogger("run_server")


def main() -> int:
    from colorrelay.config.settings import get_database_url, get_logging_config, get_store_config, read_config
    from colorrelay.core.logging_utils import setup_logging
    from colorrelay.exceptions import ConfigError

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    config_path = args[0] if args else None
    if config_path and not os.path.isabs(config_path):
        config_path = os.path.join(_PROJECT_ROOT, config_path)

    try:
        config, resolved = read_config(config_path)
        setup_logging(get_logging_config(config))
        logger.info("Config: %s", resolved)
        if get_store_config(config)["backend"] == "postgres":
            get_database_url(config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    from servers.app import run_server
    run_server(config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
