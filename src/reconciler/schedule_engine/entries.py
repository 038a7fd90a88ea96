"""Entry extraction: turn one line of schedule text into raw entries.

Parsing is a short, ordered list of named line grammars. Each grammar is a
pure function ``line -> list[RawEntry] | None``; the extractor tries them in
order and keeps the first non-empty result.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import RawEntry
from .timeparse import TIME_PATTERN, normalize_time
from .utils import sanitize_text

log = get_logger(__name__)

# Hyphen-like separators between class and trainer
SEPARATOR_RE = re.compile(r'\s*[-‒–—−]\s*')

# Class-name fragments that the separator heuristic tends to pick up as trainers
TRAINER_STOPWORDS = frozenset({
    'AM', 'PM', 'EXPRESS', 'FULL', 'BODY', 'PUSH', 'PULL', 'LAB',
    'BARRE', 'CYCLE', 'MAT',
})

_NAME_EDGE_RE = re.compile(r"^[^A-Za-z]+|[^A-Za-z']+$")
_THEME_CHARS_RE = re.compile(r"[^A-Za-z0-9!' ]+")
_GLUED_TIME_RE = re.compile(r'(\d\s?[AaPp][Mm])(?=[A-Za-z]{2})')
_STRAY_CHARS_RE = re.compile(r'[|_~"`“”]')
_QUOTED_TRAINER_RE = re.compile(r"([-–—])\s*['‘’]")


@dataclass(frozen=True)
class Span:
    """A half-open [start, end) slice of a line."""
    start: int
    end: int

    def slice(self, text: str) -> str:
        return text[self.start:self.end]


def segment_spans(line: str) -> List[Span]:
    """
    Find per-entry segment boundaries in a line.

    Every entry starts with a time token, so each segment runs from one
    time token to the next. Text before the first time token is not part
    of any segment.
    """
    starts = [match.start() for match in TIME_PATTERN.finditer(line)]
    return [
        Span(start, starts[i + 1] if i + 1 < len(starts) else len(line))
        for i, start in enumerate(starts)
    ]


def split_segments(line: str) -> List[str]:
    """Split a line that may hold several chained entries into one string per entry."""
    repaired = repair_ocr_line(line)
    segments = [span.slice(repaired).strip() for span in segment_spans(repaired)]
    return [segment for segment in segments if segment]


def repair_ocr_line(line: str) -> str:
    """
    Undo common OCR damage that hides entry structure.

    - separates a time glued to the class name ("730AMFT" -> "730AM FT")
    - drops quote characters in front of a trainer ("-'Atulan")
    - removes stray pipes, underscores and tildes
    """
    text = line.replace('’', "'")
    text = _QUOTED_TRAINER_RE.sub(r'\1 ', text)
    text = _STRAY_CHARS_RE.sub(' ', text)
    text = _GLUED_TIME_RE.sub(r'\1 ', text)
    return sanitize_text(text)


def is_valid_trainer(name: str) -> bool:
    """Trainer tokens must have at least 3 letters and not be a class-name fragment."""
    if not name:
        return False
    letters = re.sub(r"[^A-Za-z]", '', name)
    if len(letters) < 3:
        return False
    return name.split()[0].upper() not in TRAINER_STOPWORDS


def clean_class_name(text: str) -> str:
    """
    Tidy a raw class-name capture.

    Drops leading time text, trailing OCR noise and balances parentheses.

    Args:
        text: Raw class name text

    Returns:
        Cleaned class name (may be empty)
    """
    text = sanitize_text(text)

    while True:
        match = TIME_PATTERN.match(text)
        if not match:
            break
        text = text[match.end():].strip()

    text = re.sub(r'^[^\w(]+', '', text)
    tokens = text.split()

    while tokens and not re.search(r'[A-Za-z0-9]', tokens[-1]):
        tokens.pop()
    while tokens and len(tokens) > 1 and re.fullmatch(r'[A-Za-z]', tokens[-1]):
        tokens.pop()

    run = 0
    for token in reversed(tokens):
        if re.fullmatch(r'[A-Z0-9]{1,2}', token) and not token.isdigit():
            run += 1
        else:
            break
    if run >= 2 and run < len(tokens):
        tokens = tokens[:-run]

    return _balance_parentheses(' '.join(tokens))


def _balance_parentheses(text: str) -> str:
    depth = 0
    kept = []
    for char in text:
        if char == '(':
            depth += 1
        elif char == ')':
            if depth == 0:
                continue
            depth -= 1
        kept.append(char)
    result = ''.join(kept).strip()
    if depth:
        result = result.rstrip() + ')' * depth
    return result


def _clean_name_word(word: str) -> str:
    return _NAME_EDGE_RE.sub('', word)


def _is_name_continuation(word: str) -> bool:
    # "De", "Vitre", "D'Costa" continue a name; all-caps words start a theme
    cleaned = _clean_name_word(word)
    return (
        len(cleaned) >= 2
        and cleaned == word.rstrip('.,;:)')
        and cleaned[0].isupper()
        and not cleaned.isupper()
    )


def _clean_theme(text: str) -> Optional[str]:
    theme = sanitize_text(_THEME_CHARS_RE.sub(' ', text))
    if len(re.sub(r'[^A-Za-z]', '', theme)) < 3:
        return None
    return theme


def _trainer_and_theme(text: str, single_word: bool) -> Tuple[str, Optional[str]]:
    words = text.split()
    if not words:
        return '', None

    trainer_words = [_clean_name_word(words[0])]
    index = 1
    if not single_word:
        while index < len(words) and _is_name_continuation(words[index]):
            trainer_words.append(_clean_name_word(words[index]))
            index += 1

    trainer = ' '.join(word for word in trainer_words if word)
    return trainer, _clean_theme(' '.join(words[index:]))


def _split_trainer(right: str) -> Tuple[str, Optional[str], str]:
    """
    Split the text after a separator into (trainer, theme, remainder).

    When a new time follows the leading word, the remainder is the start of
    the next entry and only that leading word is the trainer.
    """
    match = TIME_PATTERN.search(right)
    if match:
        trainer, theme = _trainer_and_theme(right[:match.start()], single_word=True)
        return trainer, theme, right[match.start():]
    trainer, theme = _trainer_and_theme(right, single_word=False)
    return trainer, theme, ''


def _last_time_head(text: str) -> Optional[Tuple[str, str]]:
    matches = list(TIME_PATTERN.finditer(text))
    if not matches:
        return None
    last = matches[-1]
    return last.group(0), text[last.end():]


def _make_entry(raw_time: str, class_text: str, trainer: str,
                theme: Optional[str] = None) -> Optional[RawEntry]:
    time = normalize_time(raw_time)
    class_name = clean_class_name(class_text)
    if not time or not class_name:
        return None
    return RawEntry(time=time, class_name=class_name, trainer_name=trainer, theme=theme)


def _continues_class(right: str, separator: str, is_last: bool) -> bool:
    """
    A timeless fragment with another separator after it is part of the class
    when it is all caps ("CARDIO BARRE - PLUS - Anisha") or hyphen-joined to
    the previous word ("Pre-Natal - Anisha").
    """
    if is_last or TIME_PATTERN.search(right):
        return False
    if separator == separator.strip():
        return True
    return right.strip().isupper()


def parse_time_first(line: str) -> Optional[List[RawEntry]]:
    """
    Parse ``TIME CLASS - TRAINER`` entries, including several chained on one line.

    Example:
        "7:15 AM STRENGTH (PULL) - Anisha 7:30 AM powerCycle - Richard"
        yields two entries.
    """
    parts = SEPARATOR_RE.split(line)
    if len(parts) < 2:
        return None
    separators = SEPARATOR_RE.findall(line)

    entries: List[RawEntry] = []
    pending = parts[0]

    # One pass over the separators; each trainer token is consumed once
    for index in range(1, len(parts)):
        right = parts[index]
        head = _last_time_head(pending)
        trainer, theme, rest = _split_trainer(right)

        if head is None:
            # "FIT - Karan Bhatia - Sunday Special": trailing fragment is a theme
            if entries and not pending and not rest and entries[-1].theme is None:
                entries[-1].theme = _clean_theme(right)
            pending = rest
            continue

        raw_time, class_text = head
        if _continues_class(right, separators[index - 1], index == len(parts) - 1):
            glue = '-' if separators[index - 1] == separators[index - 1].strip() else ' '
            pending = f"{pending}{glue}{right}"
        elif is_valid_trainer(trainer):
            entry = _make_entry(raw_time, class_text, trainer, theme)
            if entry:
                entries.append(entry)
            pending = rest
        elif rest:
            pending = rest
        else:
            # "CARDIO BARRE - EXPRESS - Cauveri": the fragment belongs to the class
            pending = f"{pending} {right}"

    return entries or None


def parse_compact_ocr(line: str) -> Optional[List[RawEntry]]:
    """Repair glued OCR tokens ("730AMFT-Pramal") and parse as time-first."""
    repaired = repair_ocr_line(line)
    if repaired == sanitize_text(line):
        return None
    return parse_time_first(repaired)


def _looks_like_name(word: str) -> bool:
    cleaned = _clean_name_word(word)
    return len(cleaned) >= 3 and cleaned[0].isupper() and not cleaned.isupper()


def parse_no_dash(line: str) -> Optional[List[RawEntry]]:
    """
    Parse ``TIME CLASS Trainer`` entries that lost their separator.

    The trainer is the final word and must look like a name (capitalized,
    not all caps), which keeps class names such as "BARRE 57" intact.
    """
    entries: List[RawEntry] = []
    for segment in split_segments(line):
        match = TIME_PATTERN.match(segment)
        if not match:
            continue
        words = segment[match.end():].split()
        if len(words) < 2 or not _looks_like_name(words[-1]):
            continue
        trainer = _clean_name_word(words[-1])
        if not is_valid_trainer(trainer):
            continue
        entry = _make_entry(match.group(0), ' '.join(words[:-1]), trainer)
        if entry:
            entries.append(entry)
    return entries or None


@dataclass(frozen=True)
class LineGrammar:
    name: str
    parse: Callable[[str], Optional[List[RawEntry]]]


DEFAULT_GRAMMARS: Tuple[LineGrammar, ...] = (
    LineGrammar('time_first', parse_time_first),
    LineGrammar('compact_ocr', parse_compact_ocr),
    LineGrammar('no_dash', parse_no_dash),
)


class EntryExtractor:
    """Applies the line grammars in priority order."""

    def __init__(
        self,
        grammars: Sequence[LineGrammar] = DEFAULT_GRAMMARS,
        remap_ambiguous_hours: bool = False,
    ):
        """
        Initialize the extractor.

        Args:
            grammars: Grammars to try, highest priority first
            remap_ambiguous_hours: Opt-in repair of OCR-dropped leading "1" in AM hours
        """
        self.grammars = tuple(grammars)
        self.remap_ambiguous_hours = remap_ambiguous_hours

    def extract(self, line: str) -> List[RawEntry]:
        """
        Parse one line or segment into raw entries.

        Malformed input yields an empty list; this never raises for bad OCR.
        """
        line = sanitize_text(line)
        if not line or not TIME_PATTERN.search(repair_ocr_line(line)):
            return []

        for grammar in self.grammars:
            entries = grammar.parse(line)
            if entries:
                log.debug("grammar_matched", grammar=grammar.name, entries=len(entries))
                if self.remap_ambiguous_hours:
                    for entry in entries:
                        entry.time = normalize_time(entry.time, remap_ambiguous_hours=True) or entry.time
                return entries

        return []
