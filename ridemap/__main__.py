# ridemap/__main__.py
import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "ridemap.main:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":
    main()
