"""
➡️ But : Limiter le nombre de requêtes par IP et par type d'opération (fenêtre fixe).

RateLimitStore : interface du stockage des compteurs (injectable, remplaçable par
un cache partagé type Redis si plusieurs process).

InMemoryRateLimitStore : implémentation mono-process, avec balayage périodique
des entrées expirées.

Le moteur de jeu n'importe jamais ce module : seules les dépendances FastAPI
(app.api.v1.dependencies) s'en servent.
"""

import math
import threading
from abc import ABC, abstractmethod
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple

from app.core.config import settings


@dataclass(frozen=True)
class RateLimitPolicy:
    name: str
    max_requests: int
    window_sec: int


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float                     # epoch (secondes)
    retry_after: Optional[int] = None   # secondes, seulement si refusé

    @property
    def reset_iso(self) -> str:
        return datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat()

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_iso,
        }
        if self.retry_after is not None:
            headers["Retry-After"] = str(self.retry_after)
        return headers


def default_policies() -> Dict[str, RateLimitPolicy]:
    return {
        "general": RateLimitPolicy("general", settings.RATE_LIMIT_GENERAL_MAX, settings.RATE_LIMIT_GENERAL_WINDOW_SEC),
        "create_game": RateLimitPolicy(
            "create_game", settings.RATE_LIMIT_CREATE_GAME_MAX, settings.RATE_LIMIT_CREATE_GAME_WINDOW_SEC
        ),
        "roll_dice": RateLimitPolicy(
            "roll_dice", settings.RATE_LIMIT_ROLL_DICE_MAX, settings.RATE_LIMIT_ROLL_DICE_WINDOW_SEC
        ),
        "finish_game": RateLimitPolicy(
            "finish_game", settings.RATE_LIMIT_FINISH_GAME_MAX, settings.RATE_LIMIT_FINISH_GAME_WINDOW_SEC
        ),
        "read_only": RateLimitPolicy(
            "read_only", settings.RATE_LIMIT_READ_ONLY_MAX, settings.RATE_LIMIT_READ_ONLY_WINDOW_SEC
        ),
    }


class RateLimitStore(ABC):
    """Interface : compter un hit pour une clé et dire s'il passe."""

    @abstractmethod
    def hit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(
        self,
        *,
        sweep_interval_sec: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._entries: Dict[str, Tuple[int, float]] = {}   # key -> (count, reset_at)
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = (
            sweep_interval_sec if sweep_interval_sec is not None else settings.RATE_LIMIT_SWEEP_SEC
        )
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._entries)

    def hit(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            count, reset_at = self._entries.get(key, (0, 0.0))
            if now > reset_at:
                count, reset_at = 0, now + policy.window_sec

            if count >= policy.max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=policy.max_requests,
                    remaining=0,
                    reset_at=reset_at,
                    retry_after=max(1, math.ceil(reset_at - now)),
                )

            count += 1
            self._entries[key] = (count, reset_at)
            return RateLimitResult(
                allowed=True,
                limit=policy.max_requests,
                remaining=policy.max_requests - count,
                reset_at=reset_at,
            )

    def sweep(self) -> int:
        with self._lock:
            return self._sweep(self._clock())

    def _sweep(self, now: float) -> int:
        expired = [key for key, (_count, reset_at) in self._entries.items() if now > reset_at]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


rate_limit_store: RateLimitStore = InMemoryRateLimitStore()
