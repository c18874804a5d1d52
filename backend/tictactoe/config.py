"""Конфигурация приложения."""
import os
from functools import lru_cache


def _flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


@lru_cache
def get_config():
    return type("Config", (), {
        "host": os.environ.get("HOST", "0.0.0.0"),
        "port": int(os.environ.get("PORT", "7350")),
        "debug": _flag("DEBUG"),
        "allowed_origins": os.environ.get("ALLOWED_ORIGINS", "*").split(","),
        # Таймеры уборки (секунды)
        "match_max_age_sec": float(os.environ.get("MATCH_MAX_AGE_SEC", "1800")),
        "sweep_interval_sec": float(os.environ.get("SWEEP_INTERVAL_SEC", "300")),
        "disconnect_grace_sec": float(os.environ.get("DISCONNECT_GRACE_SEC", "5")),
    })()
