import os

from dotenv import load_dotenv

# Load Environment Variables (DB URL, CORS origins, log level)
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./vehicles.db")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# "database" persists error logs, "logging" only writes them to the log stream
ERROR_SINK = os.getenv("ERROR_SINK", "database")

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5001"))
