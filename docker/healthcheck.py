"""Container healthcheck: exit 0 once the API reports ready."""

from __future__ import annotations

import os
import sys
import urllib.error
import urllib.request


def main() -> int:
    port = os.environ.get("SKINSCORES_API_PORT", "8080")
    try:
        with urllib.request.urlopen(f"http://localhost:{port}/ready", timeout=5) as resp:
            return 0 if resp.status == 200 else 1
    except (urllib.error.URLError, OSError) as e:
        print(f"healthcheck failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
