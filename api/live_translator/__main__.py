import uvicorn

from live_translator.config import settings


def main():
    uvicorn.run(
        "live_translator.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
