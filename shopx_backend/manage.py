#!/usr/bin/env python
"""ShopX management entrypoint (dev settings unless DJANGO_SETTINGS_MODULE says otherwise)."""

from __future__ import annotations

import os
import sys


def main() -> None:
    current = (os.environ.get("DJANGO_SETTINGS_MODULE") or "").strip()
    if not current or current == "backend.settings":
        os.environ["DJANGO_SETTINGS_MODULE"] = "backend.settings.dev"

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError("Django is not installed in this environment.") from exc

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()
