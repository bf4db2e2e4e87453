"""Module entry point for python -m crm_manager."""

from __future__ import annotations

from crm_manager.app import main


if __name__ == "__main__":
    raise SystemExit(main())
