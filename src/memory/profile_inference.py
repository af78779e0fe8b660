"""Profile heuristics: display name and DISC style from free text"""
import re
from typing import Iterable, Optional

_LETTERS = "A-Za-zÀ-ÖØ-öø-ÿ"

# One word, optionally followed by a second one ("Jean Pierre", "Amine et ...")
_NAME_WORDS = rf"([{_LETTERS}'-]{{2,30}}(?:\s+[{_LETTERS}'-]{{2,30}})?)"

NAME_PATTERNS = (
    re.compile(rf"je m(?:'|’|e\s*)appelle\s+{_NAME_WORDS}", re.IGNORECASE),
    re.compile(rf"moi c['’]est\s+{_NAME_WORDS}", re.IGNORECASE),
)
SINGLE_CAPITALISED_WORD = re.compile(rf"^[A-ZÀ-ÖØ-Þ][{_LETTERS}'-]{{1,29}}[.!]?$")
_EDGE_NON_LETTERS = re.compile(rf"^[^{_LETTERS}]+|[^{_LETTERS}]+$")

MIN_NAME_LENGTH = 2

# One-word replies that are not names
COMMON_REPLIES = frozenset({
    "oui", "non", "ok", "okay", "merci", "salut", "bonjour", "bonsoir", "coucou",
    "super", "parfait", "cool", "top", "génial", "amen", "inshallah", "mashallah",
})

ACTION_WORDS = re.compile(r"(action|résultat|vite|maintenant|objectif|priorité)", re.IGNORECASE)
ENTHUSIASM_WORDS = re.compile(r"(cool|idée|créatif|enthous|fun)", re.IGNORECASE)
PEOPLE_WORDS = re.compile(r"(écoute|relation|aider|ensemble|émotion|bienveillance)", re.IGNORECASE)
STABILITY_WORDS = re.compile(r"(calme|rassure|routine|habitude)", re.IGNORECASE)
DETAIL_WORDS = re.compile(r"(détail|exact|précis|critère|mesurable|plan)", re.IGNORECASE)
SHOUTING = re.compile(r"[A-Z]{3,}")
LONG_MESSAGE_CHARS = 240


def extract_name(text: Optional[str], reserved_phrases: Iterable[str] = ()) -> Optional[str]:
    """
    Extract a display name from a message

    Recognizes "je m'appelle X", "moi c'est X", or a message made of one
    capitalised word (the usual answer to "what's your name?"). After an
    introduction, a second word is kept only when capitalised, so the rest
    of the sentence is dropped. A single word is rejected when it is a
    common reply or one of reserved_phrases (e.g. "Bismillah").

    Returns:
        The name, or None when nothing name-like is found
    """
    t = (text or "").strip()
    if not t:
        return None

    candidate = None
    for pattern in NAME_PATTERNS:
        match = pattern.search(t)
        if match:
            words = match.group(1).split()
            if len(words) > 1 and not words[1][0].isupper():
                words = words[:1]
            candidate = " ".join(words)
            break
    else:
        if SINGLE_CAPITALISED_WORD.match(t) and not _is_reserved(t, reserved_phrases):
            candidate = t

    if candidate is None:
        return None

    name = _EDGE_NON_LETTERS.sub("", candidate.strip())
    return name if len(name) >= MIN_NAME_LENGTH else None


def _is_reserved(word: str, reserved_phrases: Iterable[str]) -> bool:
    # Whole-word comparison: "Amine" is a name even though "amin" is a phrase
    lowered = word.lower().rstrip(".!")
    if lowered in COMMON_REPLIES:
        return True
    return lowered in {phrase.lower() for phrase in reserved_phrases}


def infer_disc(text: Optional[str]) -> Optional[str]:
    """
    Guess a DISC behavioural style from wording

    Returns:
        "D", "I", "S", "C", or None when the message gives no signal
    """
    t = (text or "").strip()
    if not t:
        return None

    exclamations = t.count("!")
    wants_action = bool(ACTION_WORDS.search(t))

    if wants_action and (exclamations > 0 or SHOUTING.search(t)):
        return "D"
    if exclamations > 1 or ENTHUSIASM_WORDS.search(t):
        return "I"
    if PEOPLE_WORDS.search(t) or STABILITY_WORDS.search(t):
        return "S"
    if DETAIL_WORDS.search(t) or len(t) > LONG_MESSAGE_CHARS:
        return "C"
    return None
