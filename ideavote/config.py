# env vars + constants
import os

PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# remote vote store (GitHub contents API)
GITHUB_TOKEN = os.getenv("GITHUB_TOKEN", "")
GITHUB_REPO = os.getenv("GITHUB_REPO", "preetoshii/idea-tester")
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
VOTES_FILE_PATH = os.getenv("VOTES_FILE_PATH", "votes.json")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10.0"))

# 1 = read, append, write once and fail on a stale sha
SUBMIT_MAX_ATTEMPTS = max(1, int(os.getenv("SUBMIT_MAX_ATTEMPTS", "1")))

# voting rules
PHASES = ["Planning", "Action", "Integration"]
STARS_PER_PHASE = 5
MAX_VOTES_PER_CARD = 2
DEFAULT_PHASE_GOAL = 3
