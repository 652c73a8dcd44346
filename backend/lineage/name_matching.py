"""String and date similarity primitives used by duplicate detection."""

import re
import unicodedata
from datetime import date

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_text(text: str | None) -> str:
    """Lowercase, strip diacritics and drop every non-alphanumeric character.

    "João da Silva" -> "joaodasilva"
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    without_marks = "".join(c for c in decomposed if not unicodedata.combining(c))
    return _NON_ALNUM.sub("", without_marks)


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute."""
    rows, cols = len(a) + 1, len(b) + 1
    dp = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        dp[i][0] = i
    for j in range(cols):
        dp[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            if a[i - 1] == b[j - 1]:
                dp[i][j] = dp[i - 1][j - 1]
            else:
                dp[i][j] = 1 + min(
                    dp[i - 1][j],      # delete
                    dp[i][j - 1],      # insert
                    dp[i - 1][j - 1],  # substitute
                )
    return dp[-1][-1]


def name_similarity(name1: str | None, name2: str | None) -> float:
    """Similarity 0.0 to 1.0 as 1 - distance / longest normalized length."""
    a = normalize_text(name1)
    b = normalize_text(name2)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    distance = levenshtein_distance(a, b)
    return 1.0 - distance / max(len(a), len(b))


def fuzzy_name_similarity(name1: str | None, name2: str | None) -> float:
    """Like name_similarity but a name contained in the other scores at least 0.9."""
    similarity = name_similarity(name1, name2)
    a = normalize_text(name1)
    b = normalize_text(name2)
    if a and b and (a in b or b in a):
        return max(similarity, 0.9)
    return similarity


def days_between(date1: date, date2: date) -> int:
    return abs((date1 - date2).days)


def date_proximity(date1: date | None, date2: date | None, tolerance_days: int) -> float:
    """1.0 for the same day, falling linearly to 0.7 at the tolerance, 0 beyond."""
    if date1 is None or date2 is None:
        return 0.0
    diff = days_between(date1, date2)
    if diff == 0:
        return 1.0
    if diff <= tolerance_days:
        return 1.0 - (diff / tolerance_days) * 0.3
    return 0.0


def date_bucket_similarity(date1: date | None, date2: date | None) -> float:
    """Coarse date closeness used by the generic detector."""
    if date1 is None or date2 is None:
        return 0.0
    diff = days_between(date1, date2)
    if diff == 0:
        return 1.0
    elif diff <= 30:
        return 0.95  # same month
    elif diff <= 365:
        return 0.8   # same year
    elif diff <= 365 * 2:
        return 0.5
    return 0.0


def place_similarity(place1: str | None, place2: str | None) -> float:
    a = normalize_text(place1)
    b = normalize_text(place2)
    if not a or not b:
        return 0.0
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.8
    return fuzzy_name_similarity(a, b)
