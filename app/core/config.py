"""
➡️ But : Centraliser tous les paramètres configurables (nom d'app, chemin DB, limites de jeu, rate limits, logs).

Utilise pydantic-settings pour charger automatiquement les variables d'environnement (.env, variables système…).

Fournit un objet settings unique, que tu importes ailleurs :

from app.core.config import settings
print(settings.MAX_ROLLS)


🔹 Avantages :

Plus propre que des constantes éparpillées dans le code.

Facilite le passage entre environnements (dev / prod / test).
"""

from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # -----------------------------
    # App
    # -----------------------------
    APP_NAME: str = "Dice-Ten"
    ENV: str = "dev"  # dev | prod | test
    CORS_ORIGINS: List[str] = ["*"]

    # -----------------------------
    # DB
    # -----------------------------
    SQLITE_PATH: str = "dice.db"  # fichier SQLite
    # Si tu veux forcer une URL différente (ex: Postgres), définis DATABASE_URL dans l'env.
    DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = False

    # -----------------------------
    # Règles de jeu
    # -----------------------------
    MAX_ROLLS: int = 10
    ROLL_MAX_RETRIES: int = 5             # retries optimistes si deux lancers se croisent

    LEADERBOARD_DEFAULT_LIMIT: int = 50
    LEADERBOARD_MAX_LIMIT: int = 100

    # -----------------------------
    # Rate limiting (fenêtre fixe, par IP)
    # -----------------------------
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_SWEEP_SEC: int = 300

    RATE_LIMIT_GENERAL_MAX: int = 100
    RATE_LIMIT_GENERAL_WINDOW_SEC: int = 60
    RATE_LIMIT_CREATE_GAME_MAX: int = 10
    RATE_LIMIT_CREATE_GAME_WINDOW_SEC: int = 60 * 60
    RATE_LIMIT_ROLL_DICE_MAX: int = 60
    RATE_LIMIT_ROLL_DICE_WINDOW_SEC: int = 60
    RATE_LIMIT_FINISH_GAME_MAX: int = 20
    RATE_LIMIT_FINISH_GAME_WINDOW_SEC: int = 60
    RATE_LIMIT_READ_ONLY_MAX: int = 200
    RATE_LIMIT_READ_ONLY_WINDOW_SEC: int = 60

    # -----------------------------
    # Logs
    # -----------------------------
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # console | json

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    # -----------------------------
    # Post-process values
    # -----------------------------
    def model_post_init(self, __context): # appelée automatiquement
        # DATABASE_URL par défaut depuis SQLITE_PATH si non fourni
        if not self.DATABASE_URL:
            object.__setattr__(self, "DATABASE_URL", f"sqlite:///{self.SQLITE_PATH}")

        object.__setattr__(self, "LOG_LEVEL", self.LOG_LEVEL.upper())
        object.__setattr__(self, "LOG_FORMAT", self.LOG_FORMAT.lower())


# Instance globale importable partout
settings = Settings()
