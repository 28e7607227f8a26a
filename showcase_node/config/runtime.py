from __future__ import annotations

from dataclasses import dataclass
import os


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class RuntimeSettings:
    api_host: str
    api_port: int
    store_backend: str
    session_tokens: tuple[str, ...]
    max_page_size: int
    notify_channel: str

    @classmethod
    def from_env(cls) -> "RuntimeSettings":
        return cls(
            api_host=os.getenv("SHOWCASE_API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("SHOWCASE_API_PORT", "8000")),
            store_backend=os.getenv("SHOWCASE_STORE", "memory").strip().lower(),
            session_tokens=_split_csv(os.getenv("SHOWCASE_SESSION_TOKENS", "")),
            max_page_size=int(os.getenv("SHOWCASE_MAX_PAGE_SIZE", "100")),
            notify_channel=os.getenv("SHOWCASE_NOTIFY_CHANNEL", "").strip(),
        )
