from __future__ import annotations

from barcode_qr.logging_config import setup_logging
from barcode_qr.web import create_app

app = create_app()

if __name__ == "__main__":
    setup_logging()
    app.run(host="0.0.0.0", port=5000, debug=True)
