#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
copd_app_web.py
Gradio web GUI for the BPCO / GOLD 2025 decision-support assistant.

Start:
    python copd_app_web.py

Environment:
- PORT / GRADIO_SERVER_PORT: listening port (default 7860)
- COPD_RULEBOOK: optional YAML file overriding the clinical cut-offs
- COPD_LOG_LEVEL: logging level (default INFO)
"""

from __future__ import annotations

import logging
import os

from copd.ui import build_demo


def main():
    logging.basicConfig(
        level=os.environ.get("COPD_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    demo = build_demo()
    port = int(os.environ.get("PORT", os.environ.get("GRADIO_SERVER_PORT", "7860")))
    demo.launch(
        server_name="0.0.0.0",
        server_port=port,
        share=False,
    )


if __name__ == "__main__":
    main()
