"""Field limits and defaults."""

# Boundary caps, applied after stripping whitespace
MAX_NAME_LEN = 30
MAX_TITLE_LEN = 60
MAX_DESC_LEN = 300
MAX_COMMENT_LEN = 300

MAX_IMAGE_BYTES = 10 * 1024 * 1024

# Alphabet for base-36 ids (timestamp + random suffix)
ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
ID_SUFFIX_LEN = 5

DEFAULT_STORAGE = "json"
DEFAULT_DB_PATH = "artwall.db"
DEFAULT_DATA_FILE = "data/gallery.json"
