import os
from pixstack.domain.types import AppConfig


def _env_int(key: str, default: int) -> int:
    try:
        return max(1, int(os.getenv(key, default)))
    except ValueError:
        return default


APP_CONFIG = AppConfig(
    max_workers=_env_int("PIXSTACK_MAX_WORKERS", max(1, (os.cpu_count() or 1))),
    pixel_chunk_size=_env_int("PIXSTACK_CHUNK_SIZE", 1 << 16),
    log_level=os.getenv("PIXSTACK_LOG_LEVEL", "INFO").upper(),
)
