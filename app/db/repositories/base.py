from typing import Any, Generic, Optional, Type, TypeVar
from sqlmodel import SQLModel, Session
from sqlalchemy import delete

# Type générique pour le modèle (Game, Roll)
ModelT = TypeVar("ModelT", bound=SQLModel)

class BaseRepository(Generic[ModelT]):
    """
    Repository de base pour les opérations de persistance communes.

    👉 Ne contient aucune logique métier.
    👉 Les repositories concrets définissent `model = MaClasseSQLModel`.
    👉 commit=False partout où une écriture peut faire partie d'une transaction
       orchestrée par le service (lancer = insert roll + update game).
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    # ---------- READ ----------

    def get(self, id_: Any) -> Optional[ModelT]:
        """Retourne un enregistrement par son identifiant, ou None."""
        return self.session.get(self.model, id_)

    # ---------- CREATE ----------

    def create(self, *, commit: bool = True, **fields) -> ModelT:
        """
        Crée et persiste un nouvel enregistrement.
        commit=False : flush seulement (l'ID et les contraintes sont vérifiés tout de suite).
        """
        entity = self.model(**fields)
        self.session.add(entity)
        if commit:
            self.session.commit()
            self.session.refresh(entity)
        else:
            self.session.flush()
        return entity

    # ---------- DELETE ----------

    def delete_all(self, *, commit: bool = True) -> int:
        """Supprime toutes les lignes de la table (ménage admin). Retourne le nombre supprimé."""
        result = self.session.connection().execute(delete(self.model))
        if commit:
            self.session.commit()
        return result.rowcount
