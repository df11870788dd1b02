import uvicorn

from ghcomments.config import settings


def main() -> None:
    uvicorn.run("ghcomments.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
