"""
Slug generation for posts, tags and categories.

Slugs keep Bangla text as-is unless transliteration is requested, in which
case Bangla graphemes are mapped to Latin approximations first.

    >>> smart_slugify("Hello, World!")
    'hello-world'
    >>> smart_slugify("আমার সোনার বাংলা", force_transliterate=True)
    'amar-sonar-bangla'
"""
import re
from types import MappingProxyType

from django.utils import timezone

BANGLA_RANGE = "\u0980-\u09ff"

# Nukta consonants are listed before their base consonants so the
# two-codepoint forms are replaced first.
BANGLA_TO_LATIN = MappingProxyType({
    # Nukta consonants (decomposed and precomposed)
    "\u09a1\u09bc": "r", "\u09dc": "r",
    "\u09a2\u09bc": "rh", "\u09dd": "rh",
    "\u09af\u09bc": "y", "\u09df": "y",
    # Vowels
    "অ": "o", "আ": "a", "ই": "i", "ঈ": "i", "উ": "u", "ঊ": "u",
    "ঋ": "ri", "এ": "e", "ঐ": "oi", "ও": "o", "ঔ": "ou",
    # Consonants
    "ক": "k", "খ": "kh", "গ": "g", "ঘ": "gh", "ঙ": "ng",
    "চ": "ch", "ছ": "ch", "জ": "j", "ঝ": "jh", "ঞ": "n",
    "ট": "t", "ঠ": "th", "ড": "d", "ঢ": "dh", "ণ": "n",
    "ত": "t", "থ": "th", "দ": "d", "ধ": "dh", "ন": "n",
    "প": "p", "ফ": "ph", "ব": "b", "ভ": "bh", "ম": "m",
    "য": "j", "র": "r", "ল": "l", "শ": "sh", "ষ": "sh",
    "স": "s", "হ": "h",
    # Signs
    "ৎ": "t", "ং": "ng", "ঃ": "h", "ঁ": "n", "\u09bc": "",
    # Vowel signs
    "া": "a", "ি": "i", "ী": "i", "ু": "u", "ূ": "u",
    "ৃ": "ri", "ে": "e", "ৈ": "oi", "ো": "o", "ৌ": "ou",
    # Virama
    "্": "",
    # Digits
    "০": "0", "১": "1", "২": "2", "৩": "3", "৪": "4",
    "৫": "5", "৬": "6", "৭": "7", "৮": "8", "৯": "9",
})

_BANGLA = re.compile(f"[{BANGLA_RANGE}]")
# Runs of anything that is not a word character; Bangla vowel signs are
# combining marks, so the whole block is kept explicitly.
_SEPARATORS = re.compile(f"[^\\w{BANGLA_RANGE}]+")


def normalize(text):
    """
    Turn text into a slug without transliterating it.

    Lowercases, collapses every run of whitespace, punctuation and hyphens
    into a single hyphen and strips hyphens from both ends.
    """
    slug = _SEPARATORS.sub("-", str(text).lower().strip())
    return slug.strip("-")


def transliterate(text):
    """Replace every mapped Bangla grapheme with its Latin fragment."""
    for bangla, latin in BANGLA_TO_LATIN.items():
        text = text.replace(bangla, latin)
    return text


def has_bangla(text):
    """Check if text contains any character from the Bangla block."""
    return _BANGLA.search(text) is not None


def smart_slugify(text, force_transliterate=False):
    """
    Slugify text, transliterating Bangla first when asked to.

    Without transliteration Bangla characters are kept, giving a
    native-script slug.
    """
    text = str(text)
    if force_transliterate and has_bangla(text):
        return normalize(transliterate(text))
    return normalize(text)


def truncate(slug, max_length):
    """Cut a slug to max_length without leaving a trailing hyphen."""
    return slug[:max_length].rstrip("-")


def resolve_unique(candidate, exists):
    """
    Return candidate, or candidate with a millisecond timestamp suffix
    when exists(candidate) reports a collision.

    The suffixed slug is not checked again. Errors raised by exists
    propagate to the caller.
    """
    if not exists(candidate):
        return candidate
    return f"{candidate}-{int(timezone.now().timestamp() * 1000)}"
