"""Name normalization against canonical vocabularies."""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterable, Optional

from rapidfuzz import process
from rapidfuzz.distance import Levenshtein

from .logging import get_logger
from .utils import sanitize_text
from .vocabulary import (
    CLASS_VOCABULARY,
    DEFAULT_CLASS_DENYLIST,
    LOCATION_VOCABULARY,
    TRAINER_VOCABULARY,
    Vocabulary,
)

log = get_logger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.4


def normalize_key(text: str) -> str:
    """Lookup key: lower case, separators and runs of whitespace collapsed."""
    return re.sub(r'[\s\-_.]+', ' ', text or '').strip().lower()


class Normalizer:
    """
    Maps raw names onto one vocabulary.

    Lookup order is exact alias, exact canonical (including prefix-stripped
    and first-name forms), then the closest entry by normalized edit
    distance. Anything further than the threshold is returned trimmed but
    otherwise unchanged.
    """

    def __init__(self, vocabulary: Vocabulary, threshold: float = DEFAULT_FUZZY_THRESHOLD):
        self.vocabulary = vocabulary
        self.threshold = threshold
        self._aliases = {normalize_key(k): v for k, v in vocabulary.aliases.items()}
        self._index = self._build_index(vocabulary)
        self._choices = list(self._index)

    @staticmethod
    def _build_index(vocabulary: Vocabulary) -> Dict[str, str]:
        index: Dict[str, str] = {}
        for name in vocabulary.canonical:
            key = normalize_key(name)
            index.setdefault(key, name)
            for prefix in vocabulary.strip_prefixes:
                if key.startswith(prefix):
                    index.setdefault(key[len(prefix):].strip(), name)
            if vocabulary.index_first_token:
                index.setdefault(key.split()[0], name)
        return index

    def lookup(self, raw: str) -> Optional[str]:
        """Return the canonical name for raw text, or None if nothing is close enough."""
        key = normalize_key(raw)
        if not key:
            return None

        if key in self._aliases:
            return self._aliases[key]
        if key in self._index:
            return self._index[key]

        match = process.extractOne(
            key,
            self._choices,
            scorer=Levenshtein.normalized_distance,
            score_cutoff=self.threshold,
        )
        if match and match[1] < self.threshold:
            log.debug("fuzzy_match", vocabulary=self.vocabulary.name, raw=raw,
                      matched=match[0], distance=round(match[1], 3))
            return self._index[match[0]]
        return None

    def normalize(self, raw: str) -> str:
        """
        Normalize a raw name.

        Args:
            raw: Raw text from OCR or CSV

        Returns:
            Canonical name if recognized, else the trimmed input
        """
        cleaned = sanitize_text(raw)
        if not cleaned:
            return ''
        return self.lookup(cleaned) or cleaned


class ClassNameFilter:
    """Rejects strings that are not plausible class names."""

    def __init__(self, denylist: Iterable[str] = DEFAULT_CLASS_DENYLIST,
                 trainer_names: Iterable[str] = ()):
        """
        Args:
            denylist: Lower-case words that are never class names
            trainer_names: Trainer names; their first names are denied too
        """
        denied = {normalize_key(word) for word in denylist}
        for name in trainer_names:
            key = normalize_key(name)
            if key:
                denied.add(key)
                denied.add(key.split()[0])
        self.denylist = frozenset(denied)

    def is_valid(self, name: str) -> bool:
        name = sanitize_text(name)
        if not name:
            return False
        key = normalize_key(name)
        if key in self.denylist:
            return False
        # bare numbers and codes
        if re.fullmatch(r'[\d\W_]+', name) or re.fullmatch(r'[A-Za-z]{1,2}\d+', name):
            return False
        if ' ' not in name and len(name) <= 2:
            return False
        return True


@dataclass(frozen=True)
class NormalizationLayer:
    """The three vocabularies plus the class-name filter, built once and shared."""
    classes: Normalizer
    trainers: Normalizer
    locations: Normalizer
    class_filter: ClassNameFilter

    @classmethod
    def from_vocabularies(
        cls,
        class_vocabulary: Vocabulary = CLASS_VOCABULARY,
        trainer_vocabulary: Vocabulary = TRAINER_VOCABULARY,
        location_vocabulary: Vocabulary = LOCATION_VOCABULARY,
        threshold: float = DEFAULT_FUZZY_THRESHOLD,
    ) -> 'NormalizationLayer':
        return cls(
            classes=Normalizer(class_vocabulary, threshold),
            trainers=Normalizer(trainer_vocabulary, threshold),
            locations=Normalizer(location_vocabulary, threshold),
            class_filter=ClassNameFilter(
                trainer_names=trainer_vocabulary.canonical + tuple(trainer_vocabulary.aliases)
            ),
        )

    @classmethod
    def default(cls, threshold: float = DEFAULT_FUZZY_THRESHOLD) -> 'NormalizationLayer':
        """Shared layer over the built-in vocabularies."""
        return _default_layer(threshold)


@lru_cache(maxsize=None)
def _default_layer(threshold: float) -> NormalizationLayer:
    return NormalizationLayer.from_vocabularies(threshold=threshold)
