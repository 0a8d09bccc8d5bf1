import logging
from math_islands import create_app

logging.basicConfig(
    level=logging.INFO,   # <-- allow INFO and above
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

app = create_app()

if __name__ == "__main__":
    with app.app_context():
        from math_islands.db import db
        db.create_all()  # dev convenience; use `flask db upgrade` otherwise
    app.run(host="0.0.0.0", port=5000, debug=True)
