from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _to_int(value: str, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    log_level: str = os.getenv("SKOOLRESULTS_LOG_LEVEL", "INFO").upper()

    ranking_method: str = os.getenv("SKOOLRESULTS_RANKING_METHOD", "competition").strip().lower()

    excluded_principal_subjects: tuple[str, ...] = _split_csv(
        os.getenv("SKOOLRESULTS_EXCLUDED_PRINCIPAL_SUBJECTS", "general studies")
    )

    report_cache_size: int = _to_int(os.getenv("SKOOLRESULTS_REPORT_CACHE_SIZE", "256"), 256)


settings = Settings()
