import os
from pathlib import Path

from dotenv import load_dotenv

from termlens.infra.errors import ConfigurationError

load_dotenv()


def _env_threshold(name: str, default: float) -> float:
    """Read a [0, 1] threshold from the environment, failing fast on bad values."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be between 0 and 1, got {value}")
    return value


def _env_number(name: str, default, cast=float, allow_zero: bool = False):
    """Read a positive number (or non-negative with allow_zero) from the environment."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    ok = value >= 0 if allow_zero else value > 0
    if not ok:
        bound = "0 or more" if allow_zero else "greater than 0"
        raise ConfigurationError(f"{name} must be {bound}, got {raw!r}")
    return value


DATA_DIR = Path(os.environ.get("TERMLENS_DATA_DIR", Path.home() / ".termlens"))
DB_PATH = DATA_DIR / "terms.db"

# Fuzzy score interpretation. A validate result at or above HIGH is flagged
# autoApply, MEDIUM is the default acceptance floor, LOW is the floor for
# broad/exploratory search.
FUZZY_HIGH_CONFIDENCE = _env_threshold("FUZZY_HIGH_CONFIDENCE", 0.75)
FUZZY_MEDIUM_CONFIDENCE = _env_threshold("FUZZY_MEDIUM_CONFIDENCE", 0.70)
FUZZY_LOW_CONFIDENCE = _env_threshold("FUZZY_LOW_CONFIDENCE", 0.60)

# Curated caption mishearings: the first three variants of a canonical name
# are the common ones.
PHONETIC_HIGH_CONFIDENCE = _env_threshold("PHONETIC_HIGH_CONFIDENCE", 0.5)
PHONETIC_LOW_CONFIDENCE = _env_threshold("PHONETIC_LOW_CONFIDENCE", 0.4)

# Above this a resolution is treated as categorized; below it a feedback
# item may be filed, and more than one candidate above it is ambiguous.
CATEGORIZATION_CONFIDENCE = _env_threshold("CATEGORIZATION_CONFIDENCE", 0.8)

USER_ALIAS_CONFIDENCE = _env_threshold("USER_ALIAS_CONFIDENCE", 0.95)
BUILTIN_ALIAS_CONFIDENCE = _env_threshold("BUILTIN_ALIAS_CONFIDENCE", 0.9)
PHONETIC_BONUS = _env_threshold("PHONETIC_BONUS", 0.1)

# Disambiguation boosts used by resolve-term
FACTION_HINT_BOOST = 0.2
CONTEXT_FACTION_BOOST = 0.15
RESOLVE_MIN_CONFIDENCE = 0.4
RESOLVE_LIMIT = 10
SEARCH_MIN_CONFIDENCE = 0.3

CANDIDATE_CACHE_TTL_SECONDS = _env_number("CANDIDATE_CACHE_TTL_SECONDS", 120.0, allow_zero=True)
CANDIDATE_FETCH_TIMEOUT_SECONDS = _env_number("CANDIDATE_FETCH_TIMEOUT_SECONDS", 5.0)
MAX_BATCH_TERMS = _env_number("MAX_BATCH_TERMS", 50, cast=int)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]


def thresholds() -> dict[str, float]:
    """Return the active confidence thresholds (for health/diagnostics)."""
    return {
        "fuzzy_high": FUZZY_HIGH_CONFIDENCE,
        "fuzzy_medium": FUZZY_MEDIUM_CONFIDENCE,
        "fuzzy_low": FUZZY_LOW_CONFIDENCE,
        "phonetic_high": PHONETIC_HIGH_CONFIDENCE,
        "phonetic_low": PHONETIC_LOW_CONFIDENCE,
        "categorization": CATEGORIZATION_CONFIDENCE,
    }


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
