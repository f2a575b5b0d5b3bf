"""Run the TradeConnect API with uvicorn.

    python -m tradeconnect        (or the `tradeconnect-api` script)

HOST and PORT come from settings.
"""

import uvicorn

from tradeconnect.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "tradeconnect.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
