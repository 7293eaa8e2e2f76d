"""
➡️ But : Configurer les logs de l'application une seule fois, au démarrage.

Chaque module déclare son propre logger :

logger = logging.getLogger(__name__)

et hérite de la configuration posée ici (niveau, format, handler console).
"""

import logging
import logging.config

from planitech.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "planitech": {"handlers": ["console"], "level": level, "propagate": False},
                # SQL verbeux seulement en dev
                "sqlalchemy.engine": {
                    "handlers": ["console"],
                    "level": "INFO" if settings.ENV == "dev" else "WARNING",
                    "propagate": False,
                },
            },
        }
    )
