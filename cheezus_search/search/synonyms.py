"""
Synonym expansion for cheese search terms.

Maps a search term onto a group of interchangeable spellings, translations
and common misspellings so that "chevre" also finds cheeses described as
"goat". The first matching group wins.
"""

import logging
from typing import Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Set, Tuple

logger = logging.getLogger(__name__)


class SynonymTable:
    """
    Immutable, ordered collection of synonym groups.

    Groups are scanned in insertion order, so earlier groups take
    precedence when a term could match more than one of them.
    """

    def __init__(self, groups: Mapping[str, Iterable[str]]):
        """
        Initialize synonym table.

        Args:
            groups: Canonical key mapped to its surface forms. Forms are
                    lower-cased and stripped; empty forms are ignored.
        """
        normalized = []
        for key, forms in groups.items():
            surface_forms = frozenset(
                form.lower().strip() for form in forms if form and form.strip()
            )
            if surface_forms:
                normalized.append((key.lower().strip(), surface_forms))
        self._groups: Tuple[Tuple[str, FrozenSet[str]], ...] = tuple(normalized)

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self) -> Iterator[Tuple[str, FrozenSet[str]]]:
        return iter(self._groups)

    def __contains__(self, key: object) -> bool:
        return any(group_key == key for group_key, _ in self._groups)

    def find_group(self, term: str) -> Optional[Tuple[str, FrozenSet[str]]]:
        """
        Find the first group related to a normalized term.

        A group is related when one of its forms equals the term, the term
        contains the form, or the form contains the term.

        Returns:
            Tuple of (canonical_key, surface_forms) or None
        """
        if not term:
            return None

        for key, forms in self._groups:
            if any(form == term or form in term or term in form for form in forms):
                return (key, forms)
        return None

    def expand(self, term: str) -> Set[str]:
        """
        Expand a term into itself plus the surface forms of its group.

        Args:
            term: Search term (case-insensitive, surrounding whitespace ignored)

        Returns:
            Non-empty set of lower-cased terms

        Example:
            >>> CHEESE_SYNONYMS.expand("Chevre") >= {"chevre", "goat", "chèvre"}
            True
        """
        normalized = term.lower().strip()
        expanded = {normalized}

        group = self.find_group(normalized)
        if group:
            key, forms = group
            expanded.update(forms)
            logger.debug(f"Expanded '{normalized}' via synonym group '{key}'")

        return expanded

    def to_dict(self) -> Dict[str, list]:
        """Export groups as sorted lists, in scan order."""
        return {key: sorted(forms) for key, forms in self._groups}


CHEESE_SYNONYMS = SynonymTable(
    {
        "cheddar": ["cheddar", "cheder", "cheedar", "chedar", "chedder"],
        "mozzarella": ["mozzarella", "mozarella", "mozzerella", "mozza", "mozerella"],
        "parmesan": ["parmesan", "parmigiano", "reggiano", "parm", "parmasean"],
        "brie": ["brie", "bree", "bri"],
        "feta": ["feta", "fetta", "feeta"],
        "camembert": ["camembert", "camembear", "camember", "camambert", "camenbert"],
        "gouda": ["gouda", "guda", "gooda"],
        "gruyere": ["gruyere", "gruyère", "gruyer", "gruyear"],
        "ricotta": ["ricotta", "ricota"],
        "provolone": ["provolone", "provoloni", "provelone"],
        "emmental": ["emmental", "emmenthal", "emmenthaler", "swiss"],
        "manchego": ["manchego", "manchago"],
        "gorgonzola": ["gorgonzola", "gorganzola"],
        "stilton": ["stilton", "stiliton"],
        "roquefort": ["roquefort", "rocquefort", "roquefor"],
        "havarti": ["havarti", "havarthi"],
        "goat": ["goat", "goats", "chèvre", "chevre"],
        "blue": ["blue", "bleu"],
        "sheep": ["sheep", "sheeps", "pecorino"],
    }
)


def expand_term(term: str, table: SynonymTable = CHEESE_SYNONYMS) -> Set[str]:
    """Expand a search term using the given synonym table."""
    return table.expand(term)
