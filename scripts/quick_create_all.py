"""Create the filament_profiles table for a quick dev setup (NOT for production)."""
from __future__ import annotations

from filamenthub import create_app
from filamenthub.db.session import db


def main() -> None:
    app = create_app()
    with app.app_context():
        db.create_all()
        print("Tables created.")


if __name__ == "__main__":
    main()
