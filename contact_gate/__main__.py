"""Run the service with uvicorn on the configured host and port."""

import uvicorn

from contact_gate.config.loader import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "contact_gate.main:app",
        host=settings.listen_host,
        port=settings.listen_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
