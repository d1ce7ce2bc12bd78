"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe MEDIACAT_,
et peut optionnellement être fournie via un fichier .env.

Les clés API (TMDB, TVDB) sont optionnelles - un fournisseur sans clé n'est pas sélectionné.
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de src/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe MEDIACAT_.
    Exemple : MEDIACAT_PROBER=ffprobe

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIACAT_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Base de données
    database_url: str = Field(default="sqlite:///mediacat.db")

    # Stockage local (images téléchargées, cache des réponses API)
    images_dir: Path = Field(default=Path("~/.local/share/mediacat/images"))
    cache_dir: Path = Field(default=Path(".cache/api"))

    # Clés API (OPTIONNELLES - fournisseur ignoré si non défini)
    tmdb_api_key: Optional[str] = Field(default=None)
    tvdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: str = Field(default="en-US")
    tvdb_language: str = Field(default="eng")

    # Sondage des fichiers
    prober: Literal["mediainfo", "ffprobe"] = Field(default="mediainfo")
    ffprobe_path: str = Field(default="ffprobe")

    # Workers
    worker_poll_interval: float = Field(default=1.0, gt=0)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/mediacat.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("images_dir", "cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return bool(self.tmdb_api_key)

    @property
    def tvdb_enabled(self) -> bool:
        """Vérifie si l'API TVDB est configurée."""
        return bool(self.tvdb_api_key)
