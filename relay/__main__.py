import uvicorn

from relay.config import settings


def main():
    uvicorn.run("relay.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
