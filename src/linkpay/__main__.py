"""Entry point for running the application with uvicorn."""

import uvicorn

from linkpay.config import get_settings


def main() -> None:
    """Run the application."""
    settings = get_settings()
    uvicorn.run(
        "linkpay.api.app:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
