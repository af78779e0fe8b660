"""Static texts used to build the language-model prompt

- DAY_PLANS: theme of each day of the 15-day coaching program
- Profile placeholders shown while a field is still unknown
- Section headers of the serialized context
"""

DAY_PLANS = {
    1: "Clarification des intentions : précise le défi prioritaire à résoudre en 15 jours.",
    2: "Diagnostic de la situation actuelle : état des lieux, 3 leviers, 3 obstacles.",
    3: "Vision et critères de réussite : issue idéale + 3 indicateurs.",
    4: "Valeurs et motivations : aligne objectifs et valeurs.",
    5: "Énergie : estime de soi / amour propre / confiance.",
    6: "Confiance (suite) : preuves, retours, micro-victoires.",
    7: "Bilan et KISS (Keep-Improve-Start-Stop).",
    8: "Nouveau départ : cap et prochaines 48h.",
    9: "Plan d'action simple : 1 chose / jour.",
    10: "CNV : préparer un message clé.",
    11: "Décisions : Stop / Keep / Start.",
    12: "Échelle de responsabilité : au-dessus de la ligne.",
    13: "Co-développement éclair (pairing).",
    14: "Leadership (Maxwell).",
    15: "Bilan final + plan 30 jours.",
}

UNKNOWN_PLAN = "Plan non spécifié."

UNKNOWN_NAME = "Non défini"
UNKNOWN_STYLE = "À identifier"

PROFILE_HEADER = "[PROFIL UTILISATEUR]"
FIRST_SESSION_MARKER = "[PREMIÈRE SESSION - Aucun historique]"
HISTORY_HEADER = "[HISTORIQUE DES SESSIONS PRÉCÉDENTES]"
CURRENT_SESSION_HEADER = "[SESSION ACTUELLE - JOUR {day}]"

ROLE_LABELS = {
    "user": "Utilisateur",
    "assistant": "Assistant",
}

DEFAULT_SYSTEM_PROMPT = """Tu es CoachBot, un coach personnel bienveillant qui accompagne l'utilisateur pendant un programme de 15 jours.
Tu t'appuies sur l'historique fourni pour assurer la continuité entre les jours."""

SYSTEM_PROMPT_NOTE = """

[Contexte CoachBot]
Prénom: {name}
DISC: {disc}
Rappels: réponses courtes, concrètes, micro-action 10 min, critère de réussite, tutoiement."""
