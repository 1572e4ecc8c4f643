"""Run the sandbox with uvicorn: python -m povy_sandbox"""

import uvicorn

from povy_sandbox.config import settings


def main() -> None:
    uvicorn.run(
        "povy_sandbox.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
