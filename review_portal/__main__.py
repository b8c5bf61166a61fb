"""Run the API with uvicorn: ``python -m review_portal``."""

import uvicorn


def main() -> None:
    uvicorn.run("review_portal.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
