"""Development entry point: `python app.py` (settings picked by APP_ENV)."""

from src.academy_attendance.academy_attendance.main import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=app.config.get("DEBUG", False))
