import uvicorn

from rentwear.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("rentwear.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
