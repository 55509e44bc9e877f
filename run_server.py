#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Start the dapp portal server.

    python run_server.py            # serves dapps.json
    python run_server.py --local    # serves dapps.local.json when present
"""
import logging
import sys

import uvicorn

from dapp_portal.config.settings import load_settings
from dapp_portal.main import create_app


def main(argv=None):
    settings = load_settings(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app = create_app(settings)
    except Exception as e:
        print(f"App setup failed: {e}")
        sys.exit(1)

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
