"""
Inverted index MapReduce example.
Creates an index mapping each word to the lines it appears in.
"""

import string


def map_function(content):
    """
    Map function: emit (word, line_id) for each word.

    Args:
        content: Whole text of one input file

    Yields:
        (word, "line_<n>") tuples, n counted from 1
    """
    table = str.maketrans('', '', string.punctuation)
    for line_number, line in enumerate(content.splitlines(), start=1):
        for word in line.translate(table).split():
            yield (word.lower(), f"line_{line_number}")


def reduce_function(key, values):
    """
    Reduce function: collect all line ids for a word.

    Args:
        key: Word
        values: List of line ids

    Returns:
        Comma-separated unique line ids, sorted
    """
    return ','.join(sorted(set(values)))
