"""WSGI entrypoint: `flask --app app run`."""

from src.activity_tracker.activity_tracker.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config["DEBUG"])
