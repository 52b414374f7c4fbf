# promptassembler/core/token_counter.py
from functools import lru_cache
from typing import Optional, Any
from loguru import logger

DEFAULT_ENCODING = "cl100k_base" # Common for GPT-3.5/4
FALLBACK_ENCODING = "gpt2"

@lru_cache(maxsize=1)
def _load_tiktoken() -> Optional[Any]:
    """Imports tiktoken on first use; encodings may need a download, so this stays out of import time."""
    try:
        import tiktoken
        tiktoken.get_encoding(DEFAULT_ENCODING)
        logger.debug("tiktoken library loaded successfully.")
        return tiktoken
    except ImportError:
        logger.warning("tiktoken library not found. Token counting will be estimated.")
    except Exception as e:
        logger.error(f"Failed to initialize tiktoken, token counting will be estimated: {e}")
    return None

def tiktoken_available() -> bool:
    return _load_tiktoken() is not None

@lru_cache(maxsize=4)
def _get_cached_encoder(encoding_name: str) -> Optional[Any]:
    """Loads and caches encoder objects, falling back to FALLBACK_ENCODING."""
    tiktoken = _load_tiktoken()
    if tiktoken is None:
        return None
    try:
        return tiktoken.get_encoding(encoding_name)
    except Exception as e:
        logger.warning(f"Failed to get tiktoken encoder '{encoding_name}': {e}. Trying fallback '{FALLBACK_ENCODING}'.")
        if encoding_name == FALLBACK_ENCODING:
            logger.error(f"Fallback encoder '{FALLBACK_ENCODING}' also failed. No encoder available.")
            return None
        return _get_cached_encoder(FALLBACK_ENCODING)

def estimate_tokens(text: str) -> int:
    # Rough character-based estimate
    return len(text) // 4

def count_tokens(text: str, encoding_name: str = DEFAULT_ENCODING) -> int:
    """
    Counts tokens in a string using the specified tiktoken encoding.
    Falls back to character estimation if tiktoken fails or is unavailable.
    """
    if not text:
        return 0

    encoder = _get_cached_encoder(encoding_name)
    if encoder is None:
        return estimate_tokens(text)

    try:
        return len(encoder.encode(text))
    except Exception as e:
        logger.error(f"Error encoding text for token count with '{encoding_name}': {e}")
        return estimate_tokens(text)
