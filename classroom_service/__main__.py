import uvicorn

from classroom_common.config import get_settings


def main() -> None:
    uvicorn.run("classroom_service.app.main:app", host="0.0.0.0", port=get_settings().service_port)


if __name__ == "__main__":
    main()
