"""Run the API server: python -m src.main"""

import uvicorn

from src.core.config import settings


def main() -> None:
    uvicorn.run("src.api.app:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
