"""
`python -m api` runs the development server.

Production deployments point a WSGI server at api.wsgi:app instead.
"""
import os

from . import create_app


def main():
    app = create_app(os.getenv("APP_ENV"))
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        debug=app.config["DEBUG"],
    )


if __name__ == "__main__":
    main()
