"""
Configuration du logging de l'application via loguru.

Les modules journalisent avec un contexte structure :
    logger.info("Job termine", queue="scan", job_id=12)

- Sortie console : colorée, le contexte (extra) affiché après le message
- Sortie fichier : JSON avec rotation, le contexte dans record.extra
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> <dim>{extra}</dim>"
)

# -v, -vv pour la console ; -q ne garde que les erreurs
VERBOSITY_LEVELS = ("INFO", "DEBUG", "TRACE")


def verbosity_level(default: str, verbose: int = 0, quiet: bool = False) -> str:
    """Niveau console selon les options -v/-q de la CLI."""
    if quiet:
        return "ERROR"
    if verbose <= 0:
        return default
    return VERBOSITY_LEVELS[min(verbose, len(VERBOSITY_LEVELS) - 1)]


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/mediacat.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
) -> None:
    """Configure le logging de l'application.

    Args :
        log_level : Niveau minimum pour la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Chemin vers le fichier de log JSON
        rotation_size : Taille maximale du fichier avant rotation (ex: "10 MB")
        retention_count : Nombre de fichiers rotatifs à conserver
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=CONSOLE_FORMAT,
        colorize=True,
    )

    # Le fichier capture tout, y compris les appels aux fournisseurs en DEBUG
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,
    )

    logger.debug("Logging configuré", log_file=str(log_file), console_level=log_level)
