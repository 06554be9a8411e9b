#    _____  _____   ______  _       _       _____             _   _  _  __
#   / ____||  __ \ |  ____|| |     | |     |  __ \     /\    | \ | || |/ /
#  | (___  | |__) || |__   | |     | |     | |__) |   /  \   |  \| || ' /
#   \___ \ |  ___/ |  __|  | |     | |     |  _  /   / /\ \  | . ` ||  <
#   ____) || |     | |____ | |____ | |____ | | \ \  / ____ \ | |\  || . \
#  |_____/ |_|     |______||______||______||_|  \_\/_/    \_\|_| \_||_|\_\
#

# Letter extraction utility - Turns voice transcripts into the letters the player spelled.

# --------------------------------------------------------------------------
#                                  Functions
# --------------------------------------------------------------------------
# normalize_answer: Lowercases and strips everything but a-z.
# extract_letters: Maps spoken letters, NATO words and phrases to letters.
# is_spelled_out: Whether a transcript was spelled letter by letter rather than said.

# --------------------------------------------------------------------------
#                            Variables and others
# --------------------------------------------------------------------------
# NATO_PHONETIC: NATO alphabet word -> letter.
# SPOKEN_LETTER_NAMES: Letter names (and frequent mishearings) -> letter.
# PHRASE_LETTERS: Multi-word mishearings of letter pairs -> letters.

# --------------------------------------------------------------------------
#                                   imports
# --------------------------------------------------------------------------
# re: Splitting and cleanup.

import re

NATO_PHONETIC = {
    "alpha": "a", "bravo": "b", "charlie": "c", "delta": "d", "echo": "e",
    "foxtrot": "f", "golf": "g", "hotel": "h", "india": "i", "juliet": "j",
    "juliett": "j", "kilo": "k", "lima": "l", "mike": "m", "november": "n",
    "oscar": "o", "papa": "p", "quebec": "q", "romeo": "r", "sierra": "s",
    "tango": "t", "uniform": "u", "victor": "v", "whiskey": "w", "xray": "x",
    "yankee": "y", "zulu": "z",
}

# Speech recognisers often return the letter's name instead of the letter
SPOKEN_LETTER_NAMES = {
    "ay": "a", "aye": "a", "eh": "a",
    "bee": "b", "be": "b",
    "see": "c", "sea": "c", "cee": "c",
    "dee": "d",
    "ee": "e",
    "ef": "f", "eff": "f",
    "gee": "g", "ji": "g",
    "aitch": "h", "each": "h",
    "eye": "i",
    "jay": "j",
    "kay": "k",
    "el": "l", "ell": "l",
    "em": "m",
    "en": "n",
    "oh": "o", "owe": "o",
    "pee": "p",
    "cue": "q", "queue": "q",
    "ar": "r", "are": "r",
    "es": "s", "ess": "s",
    "tee": "t", "tea": "t",
    "you": "u", "yu": "u",
    "vee": "v",
    "doubleu": "w",
    "ex": "x", "ecks": "x",
    "why": "y", "wye": "y",
    "zee": "z", "zed": "z",
}

PHRASE_LETTERS = {
    "are you in": "run",
    "i am a": "ima",
    "double you": "w",
    "double u": "w",
    "x ray": "x",
    "are you": "ru",
    "you are": "ur",
    "see you": "cu",
    "i see": "ic",
    "be a": "ba",
    "see a": "ca",
}

_PUNCTUATION = re.compile(r"[,.\-]+")
_WHITESPACE = re.compile(r"\s+")
_NON_LETTERS = re.compile(r"[^a-z]")
_SEPARATORS = re.compile(r"[\s,\-]+")


def _phrase_pattern(phrase: str) -> str:
    return rf"\b{re.escape(phrase)}\b"


def normalize_answer(text: str) -> str:
    """Lowercase and drop whitespace, punctuation and digits"""
    return _NON_LETTERS.sub("", text.lower())


def extract_letters(transcript: str) -> str:
    """
    Extract the spelled letters from a voice transcript.

    "D O G" -> "dog", "dee oh gee" -> "dog", "delta oscar golf" -> "dog",
    "are you in" -> "run". Words that are not letter forms are kept as their
    letters, so a whole word said aloud comes back in one piece.
    """
    processed = _PUNCTUATION.sub(" ", transcript.lower()).strip()

    # Longer phrases first so "are you in" wins over "are you"
    for phrase in sorted(PHRASE_LETTERS, key=len, reverse=True):
        processed = re.sub(_phrase_pattern(phrase), PHRASE_LETTERS[phrase], processed)

    letters = []
    for part in _WHITESPACE.split(processed):
        if not part:
            continue
        if part in NATO_PHONETIC:
            letters.append(NATO_PHONETIC[part])
        elif part in SPOKEN_LETTER_NAMES:
            letters.append(SPOKEN_LETTER_NAMES[part])
        else:
            letters.append(normalize_answer(part))
    return "".join(letters)


def is_spelled_out(transcript: str, correct_word: str) -> bool:
    """
    Whether a voice transcript spells the word instead of saying it.

    "D O G", "dee oh gee", "delta oscar golf" and "are you in" (for "run")
    are spelled out; "dog" on its own was just said.
    """
    # One-letter words ("a", "I") cannot be told apart
    if len(normalize_answer(correct_word)) == 1:
        return True

    processed = transcript.strip().lower()
    if not processed:
        return False

    if any(re.search(_phrase_pattern(phrase), processed) for phrase in PHRASE_LETTERS):
        return True

    # Letters and letter names arrive as separate parts; a said word is one part
    parts = [part for part in _SEPARATORS.split(processed) if part]
    return len(parts) > 1
