"""Removal of non-content nodes from an HTML fragment."""

from ..document import parse_fragment

# Never content, whatever the profile
NON_CONTENT_TAGS = ("script", "style", "iframe", "noscript", "svg")


def sanitize(fragment: str) -> str:
    """
    Strip non-content nodes from an HTML fragment.

    The fragment is parsed into a tree of its own, so nothing from the page
    it was cut from can leak back in. Sanitizing twice gives the same result
    as sanitizing once.

    Args:
        fragment: HTML fragment (not a full document)

    Returns:
        The cleaned fragment
    """
    soup = parse_fragment(fragment)
    for node in soup.find_all(NON_CONTENT_TAGS):
        # Nested inside a node removed earlier in this pass
        if node.decomposed:
            continue
        node.decompose()
    return soup.decode()
