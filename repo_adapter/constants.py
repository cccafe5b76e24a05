# Provider Entry Types
PROVIDER_TYPE_FILE = "file"
PROVIDER_TYPE_DIR = "dir"
PROVIDER_TYPE_SYMLINK = "symlink"

BASE64_ENCODING = "base64"

# Commit Messages
SCAFFOLD_MESSAGE = "Scaffold path: {path}"

# Error Classification
CONFLICT_STATUSES = frozenset({409, 412})
AUTH_STATUSES = frozenset({401, 403})
RATE_LIMIT_HINT = "rate limit"
VALIDATION_STATUS = 422
CONFLICT_HINTS = ("already exists", "sha", "does not match")

# Log Sanitizing
SECRET_PATTERNS = (
    r"ghp_\w+",
    r"gho_\w+",
    r"Bearer\s+[\w.-]+",
    r"ghs_\w+",
    r"github_pat_\w+",
    r"(?<=Authorization: )token\s+\S+",
)
MAX_LOG_DICT_CHARS = 200
MAX_LOG_CHARS = 500
