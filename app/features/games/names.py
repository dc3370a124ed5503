"""
Normalisation des noms de joueurs.

Fonctions pures (aucune I/O) : le front peut afficher exactement le nom que le
serveur enregistrera (voir GET /api/v1/names/preview).

Règles :
- après trim, 1 à 50 caractères ;
- uniquement lettres ASCII, espaces, tirets, apostrophes et points ;
- au moins une lettre ;
- espaces multiples réduits à un seul, chaque mot en "Title case"
  (première lettre en majuscule, le reste en minuscules).
"""

import re
from typing import Optional

from app.core.errors import InvalidNameError

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 50

_ALLOWED = re.compile(r"^[A-Za-z\s\-'.]+$")
_HAS_LETTER = re.compile(r"[A-Za-z]")
_WHITESPACE_RUN = re.compile(r"\s+")


def _title_word(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def normalize_player_name(raw: str) -> str:
    """Retourne le nom normalisé, ou lève InvalidNameError."""
    if not isinstance(raw, str):
        raise InvalidNameError()

    trimmed = raw.strip()
    if not (NAME_MIN_LENGTH <= len(trimmed) <= NAME_MAX_LENGTH):
        raise InvalidNameError(details={"reason": "length"})
    if not _ALLOWED.match(trimmed):
        raise InvalidNameError(details={"reason": "characters"})
    if not _HAS_LETTER.search(trimmed):
        raise InvalidNameError(details={"reason": "no_letter"})

    collapsed = _WHITESPACE_RUN.sub(" ", trimmed)
    return " ".join(_title_word(word) for word in collapsed.split(" "))


def preview_player_name(raw: str) -> Optional[str]:
    try:
        return normalize_player_name(raw)
    except InvalidNameError:
        return None
