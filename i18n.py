"""
API messages per language

Only the error keys raised by the leaderboard are listed here. Unknown
languages fall back to DEFAULT_LANG.
"""
import os
from typing import Dict, Optional

ALLOWED_LANGS = ("fr", "en", "es")

MESSAGES: Dict[str, Dict[str, str]] = {
    "fr": {
        "method_not_allowed": "Méthode non autorisée",
        "params_missing": "Données manquantes : nom ou score",
        "invalid_score": "Score invalide",
        "invalid_name": "Pseudo invalide (2 à 20 caractères : lettres, chiffres, espaces, - et _)",
        "invalid_difficulty": "Niveau de difficulté invalide",
        "invalid_time": "Temps invalide",
        "invalid_socials": "Format des réseaux sociaux invalide",
        "name_taken": "Pseudo déjà pris",
        "db_client_missing": "Client de base de données non initialisé",
        "server_error": "Erreur serveur",
    },
    "en": {
        "method_not_allowed": "Method not allowed",
        "params_missing": "Missing data: name or score",
        "invalid_score": "Invalid score",
        "invalid_name": "Invalid name (2 to 20 characters: letters, digits, spaces, - and _)",
        "invalid_difficulty": "Invalid difficulty level",
        "invalid_time": "Invalid time",
        "invalid_socials": "Invalid socials format",
        "name_taken": "Name already taken",
        "db_client_missing": "Database client not initialized",
        "server_error": "Server error",
    },
    "es": {
        "method_not_allowed": "Método no permitido",
        "params_missing": "Faltan datos: nombre o puntuación",
        "invalid_score": "Puntuación no válida",
        "invalid_name": "Nombre no válido (2 a 20 caracteres: letras, números, espacios, - y _)",
        "invalid_difficulty": "Nivel de dificultad no válido",
        "invalid_time": "Tiempo no válido",
        "invalid_socials": "Formato de redes sociales no válido",
        "name_taken": "Nombre ya en uso",
        "db_client_missing": "Cliente de base de datos no inicializado",
        "server_error": "Error del servidor",
    },
}


def default_lang() -> str:
    lang = os.getenv("DEFAULT_LANG", "fr")
    return lang if lang in MESSAGES else "fr"


def get_api_text(lang: Optional[str]) -> Dict[str, str]:
    return MESSAGES.get(lang or "", MESSAGES[default_lang()])


def translate(key: str, lang: Optional[str] = None) -> str:
    text = get_api_text(lang)
    if key in text:
        return text[key]
    return MESSAGES[default_lang()].get(key, key)
