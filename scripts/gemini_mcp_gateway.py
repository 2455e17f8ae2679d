#!/usr/bin/env python3
"""
Gemini MCP Gateway Server - Entry Point

Thin wrapper around gemini_mcp.gateway.server for running from a checkout.

Usage:
    python scripts/gemini_mcp_gateway.py
    python scripts/gemini_mcp_gateway.py --cache-dir /tmp/chunks --cache-ttl 900 --log-level DEBUG
"""

import sys
from pathlib import Path

# Repo root on path so gemini_mcp is importable without installation
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gemini_mcp.gateway.server import main  # noqa: E402

if __name__ == "__main__":
    main()
