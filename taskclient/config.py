# taskclient/config.py

import os

from dotenv import load_dotenv

load_dotenv(override=False)

BASE_URL = os.getenv("TASKCLIENT_BASE_URL", "http://127.0.0.1:5000/api").rstrip("/")
