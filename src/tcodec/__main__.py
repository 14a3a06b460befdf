from __future__ import annotations

from tcodec.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
