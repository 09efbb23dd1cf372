"""Run the TagWiki server: ``python -m tagwiki``."""

import uvicorn

from tagwiki.config import settings


def main() -> None:
    uvicorn.run(
        "tagwiki.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
