"""
Classic MapReduce word count example.
Counts the frequency of each word in the input text.
"""

import string


def map_function(content):
    """
    Map function: emit (word, "1") for each word in the input.

    Args:
        content: Whole text of one input file

    Yields:
        (word, "1") tuples
    """
    # Remove punctuation and split into words
    words = content.translate(str.maketrans('', '', string.punctuation)).split()

    for word in words:
        yield (word.lower(), "1")


def reduce_function(key, values):
    """
    Reduce function: count the occurrences of a word.

    Args:
        key: Word
        values: One "1" per occurrence

    Returns:
        Number of occurrences
    """
    return len(values)
