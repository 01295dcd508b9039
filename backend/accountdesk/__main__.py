import uvicorn

from accountdesk.settings import settings


def main() -> None:
    uvicorn.run("accountdesk.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
