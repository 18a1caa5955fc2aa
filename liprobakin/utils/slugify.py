"""Team slugs used in public URLs, e.g. /teams/heritage-de-kinshasa."""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    Lowercase ASCII slug: accents dropped, apostrophes removed, every other
    run of non-alphanumerics collapsed to one hyphen.

    "Héritage de Kinshasa" -> "heritage-de-kinshasa"
    "Mazembe N'Djili" -> "mazembe-ndjili"
    """
    decomposed = unicodedata.normalize("NFKD", text or "")
    ascii_text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    ascii_text = ascii_text.encode("ascii", "ignore").decode("ascii").lower()
    ascii_text = ascii_text.replace("'", "")
    return _NON_ALNUM.sub("-", ascii_text).strip("-")
