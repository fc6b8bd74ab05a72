from os import getenv

PORT: int = int(getenv("PORT", 8000))

# The development server is meant to be reachable from other devices on the network
HOST: str = getenv("HOST", "0.0.0.0")  # nosec: B104

LOG_REQUESTS: bool = getenv("RESPIPE_LOG_REQUESTS", "1") == "1"

# Base directory for relative file references
ROOT: str = getenv("RESPIPE_ROOT", ".")

# File served for request paths ending in `/`
INDEX_FILE: str = getenv("RESPIPE_INDEX", "index.html")

# EOF
