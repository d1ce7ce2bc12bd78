"""
Implementations SQLModel des repositories.

Ce module contient les implementations concretes des interfaces repository
definies dans src/core/ports/repositories.py, utilisant SQLModel pour
la persistance SQLite.

Chaque repository :
- Herite de l'interface ABC correspondante du domaine
- Recoit une session SQLModel via injection de dependances
- Convertit entre entites de domaine (dataclass) et modeles DB (SQLModel)
"""

from src.infrastructure.persistence.repositories.collection_repository import (
    SQLModelCollectionRepository,
)
from src.infrastructure.persistence.repositories.details_repository import (
    SQLModelDetailsRepository,
)
from src.infrastructure.persistence.repositories.image_repository import (
    SQLModelImageRepository,
)
from src.infrastructure.persistence.repositories.job_repository import (
    SQLModelJobRepository,
)
from src.infrastructure.persistence.repositories.library_repository import (
    SQLModelLibraryRepository,
)
from src.infrastructure.persistence.repositories.media_repository import (
    SQLModelMediaRepository,
)
from src.infrastructure.persistence.repositories.person_repository import (
    SQLModelCreditRepository,
    SQLModelPersonRepository,
)

__all__ = [
    "SQLModelCollectionRepository",
    "SQLModelCreditRepository",
    "SQLModelDetailsRepository",
    "SQLModelImageRepository",
    "SQLModelJobRepository",
    "SQLModelLibraryRepository",
    "SQLModelMediaRepository",
    "SQLModelPersonRepository",
]
