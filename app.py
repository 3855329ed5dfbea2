"""Development entrypoint delegating to the application package."""

import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from credential_hub.main import create_app

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "3001")), debug=True)
