"""Interpret transcript fragments as integer values.

Two independent strategies are tried: a literal digit parse ("42") and a
spelled-out parse ("forty two", "forty-two", "二十三"). Spelled numbers are
parsed with a small pure grammar per language so results never depend on a
platform number formatter.
"""
import re
from typing import Dict, List, Optional

from numberexplorer.ChineseNumerals import MAX_LABEL_VALUE, chinese_label

_LITERAL_PATTERN = re.compile(r'[+-]?[0-9]+')

# Sentence punctuation recognizers append to short utterances ("Forty two.")
_TRAILING_PUNCTUATION = '.!?,;:。！？，'

ENGLISH_UNITS: Dict[str, int] = {
    'zero': 0, 'one': 1, 'two': 2, 'three': 3, 'four': 4,
    'five': 5, 'six': 6, 'seven': 7, 'eight': 8, 'nine': 9,
    'ten': 10, 'eleven': 11, 'twelve': 12, 'thirteen': 13, 'fourteen': 14,
    'fifteen': 15, 'sixteen': 16, 'seventeen': 17, 'eighteen': 18, 'nineteen': 19,
}

ENGLISH_TENS: Dict[str, int] = {
    'twenty': 20, 'thirty': 30, 'forty': 40, 'fifty': 50,
    'sixty': 60, 'seventy': 70, 'eighty': 80, 'ninety': 90,
}

_HUNDRED = 'hundred'
_CONJUNCTION = 'and'

CHINESE_LABELS: Dict[str, int] = {chinese_label(n): n for n in range(MAX_LABEL_VALUE + 1)}

SUPPORTED_LANGUAGES = ('en', 'zh')


def language_of(locale: str) -> str:
    """Primary language subtag of a BCP 47 style tag ("en-US" -> "en")."""
    return locale.replace('_', '-').split('-')[0].lower()


def parse_literal(text: str) -> Optional[int]:
    """Parse text as a plain integer.

    Whitespace is trimmed and case folded; no partial parses are accepted,
    so "12 apples" yields None.

    Args:
        text: Transcript fragment

    Returns:
        Integer value or None
    """
    cleaned = text.strip().lower()
    if not _LITERAL_PATTERN.fullmatch(cleaned):
        return None
    return int(cleaned)


def _parse_english_below_hundred(tokens: List[str]) -> Optional[int]:
    if len(tokens) == 1:
        word = tokens[0]
        if word in ENGLISH_UNITS:
            return ENGLISH_UNITS[word]
        return ENGLISH_TENS.get(word)

    if len(tokens) == 2:
        tens, ones = tokens
        if tens in ENGLISH_TENS and ones in ENGLISH_UNITS and 1 <= ENGLISH_UNITS[ones] <= 9:
            return ENGLISH_TENS[tens] + ENGLISH_UNITS[ones]

    return None


def parse_english(text: str) -> Optional[int]:
    """Parse spelled-out English cardinals from zero to nine hundred ninety nine.

    Grammar:
        number   := below100 | hundreds
        hundreds := [a | one..nine] "hundred" [["and"] below100]
        below100 := unit | tens | tens unit(1..9)

    A single hyphen may join two words ("forty-two"); empty hyphen parts
    ("-forty", "forty--two") are rejected.
    """
    tokens = []
    for word in text.lower().split():
        parts = word.split('-')
        if not all(parts):
            return None
        tokens.extend(parts)
    if not tokens:
        return None

    total = 0
    index = 0
    if tokens[0] == _HUNDRED:
        total, index = 100, 1
    elif len(tokens) >= 2 and tokens[1] == _HUNDRED:
        multiplier = 1 if tokens[0] == 'a' else ENGLISH_UNITS.get(tokens[0])
        if multiplier is None or not 1 <= multiplier <= 9:
            return None
        total, index = multiplier * 100, 2

    rest = tokens[index:]
    if index and rest and rest[0] == _CONJUNCTION:
        rest = rest[1:]
        if not rest:
            return None

    if not rest:
        return total if index else None

    value = _parse_english_below_hundred(rest)
    if value is None or (index and value == 0):
        return None
    return total + value


def parse_chinese(text: str) -> Optional[int]:
    """Parse a Chinese numeral label (inverse of chinese_label)."""
    cleaned = ''.join(text.split())
    return CHINESE_LABELS.get(cleaned)


_SPELLED_PARSERS = {
    'en': parse_english,
    'zh': parse_chinese,
}


def strip_sentence_punctuation(text: str) -> str:
    """Trim whitespace and trailing sentence punctuation."""
    return text.strip().rstrip(_TRAILING_PUNCTUATION).strip()


class NumeralInterpreter:
    """Decides whether a transcript names a target value.

    Args:
        locale: Language tag selecting the spelled-number grammar (e.g. "en-US")

    Raises:
        ValueError: locale language is not supported
    """

    def __init__(self, locale: str = 'en-US'):
        if language_of(locale) not in _SPELLED_PARSERS:
            raise ValueError(
                f"Unsupported locale '{locale}'; supported languages: {', '.join(SUPPORTED_LANGUAGES)}"
            )
        self.locale: str = locale

    @staticmethod
    def parse_literal(text: str) -> Optional[int]:
        return parse_literal(text)

    def parse_spelled(self, text: str, locale: Optional[str] = None) -> Optional[int]:
        """Parse spelled-out number words using the locale's grammar.

        Args:
            text: Transcript fragment
            locale: Language tag; defaults to the interpreter's locale

        Returns:
            Integer value, or None if text does not fully resolve to a number
        """
        language = language_of(locale or self.locale)
        parser = _SPELLED_PARSERS.get(language)
        if parser is None:
            return None
        return parser(strip_sentence_punctuation(text))

    def matches(self, transcript: str, target: int) -> bool:
        """
        Returns:
            True if transcript is target written in digits or spelled out
        """
        candidate = strip_sentence_punctuation(transcript)
        if not candidate:
            return False

        if parse_literal(candidate) == target:
            return True
        return self.parse_spelled(candidate) == target
