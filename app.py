"""Development entrypoint: ``python app.py`` or ``flask --app app run``."""

from src.company_management.company_management.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=bool(app.config.get("DEBUG")))
