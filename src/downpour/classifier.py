"""Transport failure classification.

Maps the textual description of a failed request onto a ``Category`` by
scanning an ordered table of known error signatures. The first signature
found in the description wins, so table order defines precedence between
overlapping signatures. Matching is case-insensitive.

The classification is:
- deterministic (no state, no I/O)
- text-based (substring match against OS / network error wording)
- extensible only by editing or passing a different table
"""

from .models import Category, SignatureTable


DEFAULT_SIGNATURES: SignatureTable = (
    ("too many open files", Category.TOO_MANY_FILES),
    ("connection reset by peer", Category.CONNECTION_REJECTED),
    ("connection refused", Category.CONNECTION_REFUSED),
    ("no such host", Category.NO_SUCH_HOST),
    ("name or service not known", Category.NO_SUCH_HOST),
    ("nodename nor servname provided", Category.NO_SUCH_HOST),
    ("temporary failure in name resolution", Category.NO_SUCH_HOST),
    ("broken pipe", Category.BROKEN_PIPE),
    ("server disconnected", Category.SERVER_DISCONNECTED),
    ("timeout", Category.TIMEOUT),
)


def classify_failure(
    description: str, signatures: SignatureTable = DEFAULT_SIGNATURES
) -> Category:
    """Return the category of the first signature contained in ``description``.

    Falls back to ``Category.UNKNOWN`` when nothing matches.
    """
    haystack = (description or "").casefold()
    for signature, category in signatures:
        if signature.casefold() in haystack:
            return category
    return Category.UNKNOWN
