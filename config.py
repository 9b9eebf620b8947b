"""
Configuration settings for the Blog Posts API
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

# An empty path selects an in-memory store
DATABASE_PATH = os.getenv("DATABASE_PATH", str(BASE_DIR / "data"))
TEST_DATABASE_PATH = os.getenv("TEST_DATABASE_PATH", "")
COLLECTION_NAME = os.getenv("COLLECTION_NAME", "blog_posts")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
