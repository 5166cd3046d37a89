"""KCC site entrypoint.

Run with:
  python -m kcc
"""

import os
import uvicorn

from kcc.core.logging_config import configure_logging


def main() -> None:
    configure_logging()
    host = os.getenv("KCC_HOST", "0.0.0.0")
    port = int(os.getenv("KCC_PORT", "8000"))
    reload = os.getenv("KCC_RELOAD", "false").lower() in {"1", "true", "yes", "y"}
    uvicorn.run("kcc.app:create_app", factory=True, host=host, port=port, reload=reload)

if __name__ == "__main__":
    main()
