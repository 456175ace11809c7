"""Run the API with uvicorn: ``python -m src.api`` (listens on $PORT, default 5000)."""

import uvicorn

from src import config


def main() -> None:
    uvicorn.run("src.api.app:app", host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
