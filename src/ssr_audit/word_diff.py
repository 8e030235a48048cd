"""Word-frequency comparison between the two renders of a page."""

import re
from collections import Counter
from typing import List

from ssr_audit.constants import MAX_WORD_LENGTH, MIN_WORD_LENGTH, STOP_WORDS
from ssr_audit.models import WordDiffEntry

_NON_WORD = re.compile(r"\W+", re.ASCII)
_LOWERCASE_LETTERS = re.compile(r"^[a-z]+$")


def tokenize(text: str) -> List[str]:
    """Lower-case the text and split it on runs of non-ASCII-word characters."""
    return [token for token in _NON_WORD.split(text.lower()) if token]


def is_countable(word: str) -> bool:
    """Keep human-readable words: 3 to 14 letters, not a stop word."""
    return (
        MIN_WORD_LENGTH < len(word) < MAX_WORD_LENGTH
        and _LOWERCASE_LETTERS.match(word) is not None
        and word not in STOP_WORDS
    )


def word_frequencies(text: str) -> Counter:
    """Count countable words in a text extract."""
    return Counter(word for word in tokenize(text) if is_countable(word))


def diff_words(text_with_scripting: str, text_without_scripting: str) -> List[WordDiffEntry]:
    """Classify every word a user sees by whether a non-scripting crawler sees it too.

    Words that only appear without scripting are left out. Entries keep the
    order in which words first appear in the scripted text.
    """
    user_counts = word_frequencies(text_with_scripting)
    crawler_counts = word_frequencies(text_without_scripting)

    return [
        WordDiffEntry(
            word=word,
            weight=count,
            visible_to_no_script=crawler_counts[word] > 0,
        )
        for word, count in user_counts.items()
        if count > 0
    ]
