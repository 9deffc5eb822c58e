"""
Sample test data for VoxFoyer testing.

Realistic French transcripts, household children and classifier answers
shared by the unit and integration tests.
"""

from datetime import datetime

# Monday 19 October 2026, 10:30
FIXED_NOW = datetime(2026, 10, 19, 10, 30)

SAMPLE_CHILDREN = ["Johan", "Emma", "Léa"]

# Transcripts with the fields the keyword provider is expected to recover
SAMPLE_TRANSCRIPTS = [
    {
        "id": "vocal_001",
        "transcript": "Inscrire Johan au cours de natation pour septembre",
        "child_name": "Johan",
        "category": "activites",
        "date_phrase": "septembre",
        "urgency": "normale",
    },
    {
        "id": "vocal_002",
        "transcript": "Prendre rendez-vous chez le dentiste pour Emma demain",
        "child_name": "Emma",
        "category": "sante",
        "date_phrase": "demain",
        "urgency": "normale",
    },
    {
        "id": "vocal_003",
        "transcript": "Acheter le cadeau d'anniversaire de Léa avant samedi, c'est urgent",
        "child_name": "Léa",
        "category": "social",
        "date_phrase": "avant samedi",
        "urgency": "haute",
    },
    {
        "id": "vocal_004",
        "transcript": "Renvoyer le dossier de la CAF quand on peut",
        "child_name": None,
        "category": "administratif",
        "date_phrase": None,
        "urgency": "basse",
    },
    {
        "id": "vocal_005",
        "transcript": "Acheter les fournitures scolaires à la rentrée",
        "child_name": None,
        "category": "ecole",
        "date_phrase": "à la rentrée",
        "urgency": "normale",
    },
]

# Answers as returned by the local LLM in the Ollama "response" field
SAMPLE_LLM_RESPONSES = {
    "plain_json": (
        '{"action": "Emmener Emma chez le médecin", "childName": "Emma", '
        '"date": "vendredi prochain", "category": "sante", "urgency": "normale", '
        '"confidence": 0.92, "reasoning": "Texte clair"}'
    ),
    "fenced_json": (
        "Voici la tâche:\n```json\n"
        '{"action": "Payer la cantine", "childName": null, "date": "cette semaine", '
        '"category": "ecole", "urgency": "haute", "confidence": 0.85}'
        "\n```"
    ),
    "french_keys": (
        '{"action": "Signer le carnet", "enfant": "Johan", "date": "demain", '
        '"categorie": "École", "urgence": "Haute", "confiance": "0.8"}'
    ),
    "unknown_category": (
        '{"action": "Réparer le vélo", "childName": "Emma", "date": "demain", '
        '"category": "bricolage", "urgency": "normale", "confidence": 0.9}'
    ),
    "unknown_child": (
        '{"action": "Préparer le goûter", "childName": "Lucas", "date": "demain", '
        '"category": "quotidien", "urgency": "normale", "confidence": 0.9}'
    ),
    "empty_action": (
        '{"action": "   ", "childName": null, "date": null, '
        '"category": "quotidien", "urgency": "normale", "confidence": 0.9}'
    ),
    "not_json": "Je n'ai pas compris la demande.",
}

SAMPLE_CONFIGURATIONS = {
    "default": {
        "app_name": "VoxFoyer-Test",
        "classifier": {
            "provider": "keyword",
            "model": "test-model",
            "base_url": "http://localhost:11434",
            "timeout": 5,
            "temperature": 0.0,
        },
        "temporal": {
            "default_offset_days": 3,
            "week_end_day": "dimanche",
        },
        "confidence": {
            "default_penalty": 0.2,
        },
        "logging": {
            "level": "DEBUG",
            "log_to_console": False,
        },
    },
    "test_overrides": {
        "temporal": {
            "week_end_day": "vendredi",
        },
        "confidence": {
            "default_penalty": 0.3,
        },
    },
}
