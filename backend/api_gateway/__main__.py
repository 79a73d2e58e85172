"""Run the gateway with uvicorn: python -m api_gateway"""

import uvicorn

from api_gateway.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "api_gateway.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
