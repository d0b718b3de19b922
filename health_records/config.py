# health_records/config.py
"""
Runtime settings, read once from the environment.
A local .env file (if present) is loaded first; real env vars win.
"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


# 数据库文件：默认在当前目录下的 health_records.db
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./health_records.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


CORS_ORIGINS = _split_origins(os.getenv("CORS_ORIGINS", "*"))
