import os

from dotenv import find_dotenv, load_dotenv

from finance_chat.logger import get_logger

logger = get_logger(__name__)


CONFIG_FILENAME = "config.yaml"

_CONFIG_KEYS = (
    "LOG_LEVEL",
    "LOG_DIR",
    "DATA_DIR",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OPENAI_MAX_TOKENS",
    "OPENAI_TEMPERATURE",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_TABLE",
    "DEFAULT_ACCOUNT_ID",
    "MEMORY_THRESHOLD",
    "CATEGORY_KEYWORDS",
)


def _resolve_dotenv_path() -> str | None:
    config_dir = os.getenv("CONFIG_DIR")
    if config_dir:
        candidate = os.path.join(config_dir, ".env")
        if os.path.exists(candidate):
            return candidate
    return find_dotenv(usecwd=True) or None


def _config_value(raw_value: str) -> str:
    """Unquote ``"..."`` / ``'...'`` values; otherwise drop a trailing ``# comment``."""
    value = raw_value.strip()
    if value[:1] in {'"', "'"}:
        end = value.find(value[0], 1)
        if end > 0:
            return value[1:end]
    return value.split(" #", 1)[0].strip()


def read_config_file(path: str | None) -> dict[str, str]:
    """Read flat ``KEY: value`` lines; comments and blank values are skipped."""
    if not path or not os.path.exists(path):
        return {}

    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = _config_value(raw_value)
            if key.strip() and value:
                values[key.strip()] = value
    return values


def load_environment() -> None:
    dotenv_path = _resolve_dotenv_path()
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    config_dir = os.getenv("CONFIG_DIR") or os.getcwd()
    file_values = read_config_file(os.path.join(config_dir, CONFIG_FILENAME))

    # Real environment always wins over config.yaml
    for key in _CONFIG_KEYS:
        if key not in os.environ and key in file_values:
            os.environ[key] = file_values[key]


def ensure_dirs(*paths: str | None) -> None:
    for path in paths:
        if path and path not in {".", "./"}:
            os.makedirs(path, exist_ok=True)


def get_env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning(
            "[ENV] %s='%s' below minimum %s, using default %s.",
            name,
            raw,
            min_value,
            default,
        )
        return default
    return value


def get_env_float(name: str, default: float = 0.0) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("[ENV] Invalid %s='%s', using default %s.", name, raw, default)
        return default


_SENSITIVE_ENV_KEYS = ("KEY", "TOKEN", "SECRET", "PASSWORD")

_ENV_KEYS_TO_LOG = (
    "LOG_LEVEL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "SUPABASE_TABLE",
    "DEFAULT_ACCOUNT_ID",
    "MEMORY_THRESHOLD",
    "CATEGORY_KEYWORDS",
)


def _should_mask_env_value(name: str, value: str) -> bool:
    if any(part in _SENSITIVE_ENV_KEYS for part in name.upper().split("_")):
        return True
    # OpenAI keys and Supabase JWTs
    return value.startswith("sk-") or (value.startswith("eyJ") and value.count(".") == 2)


def mask_env_value(name: str, value: str) -> str:
    sanitized = value.replace("\r", "\\r").replace("\n", "\\n")
    if not _should_mask_env_value(name, sanitized):
        return sanitized
    if len(sanitized) <= 4:
        return "****"
    return f"{sanitized[:2]}...{sanitized[-2:]}"


def log_environment() -> None:
    logger.info("[ENV] Logging configured environment variables (masked where needed).")
    for key in _ENV_KEYS_TO_LOG:
        raw_value = os.getenv(key)
        value = "<unset>" if raw_value is None else mask_env_value(key, raw_value)
        logger.info("[ENV] %s=%s", key, value)


DEFAULT_ACCOUNT_ID = "default-user"
DEFAULT_TABLE = "finance_chat_data"
DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MEMORY_THRESHOLD = 90.0


load_environment()

DATA_DIR = os.getenv("DATA_DIR", ".")
LOG_DIR = os.getenv("LOG_DIR")
CONFIG_DIR = os.getenv("CONFIG_DIR")

ensure_dirs(DATA_DIR, LOG_DIR, CONFIG_DIR)


def get_account_id() -> str:
    return os.getenv("DEFAULT_ACCOUNT_ID") or DEFAULT_ACCOUNT_ID


def get_table_name() -> str:
    return os.getenv("SUPABASE_TABLE") or DEFAULT_TABLE


def get_category_keywords() -> dict[str, list[str]]:
    """
    Extra category keywords from ``CATEGORY_KEYWORDS``.

    Format: ``Pets=vet,kibble;Food=ramen``. Groups without ``=`` are ignored.
    """
    raw = os.getenv("CATEGORY_KEYWORDS") or ""
    groups: dict[str, list[str]] = {}
    for chunk in raw.split(";"):
        name, sep, keywords = chunk.partition("=")
        name = name.strip()
        if not sep or not name:
            if chunk.strip():
                logger.warning("[ENV] Ignoring CATEGORY_KEYWORDS entry '%s'.", chunk.strip())
            continue
        words = [word.strip() for word in keywords.split(",") if word.strip()]
        if words:
            groups.setdefault(name, []).extend(words)
    return groups
