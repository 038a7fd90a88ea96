"""Schedule parser: page payloads in, canonical schedule entries out."""

from typing import Dict, Iterable, List, Optional, Union

from .assembly import assemble_entries, sort_entries
from .config import EngineSettings
from .entries import EntryExtractor
from .layout import LayoutReconstructor
from .logging import get_logger
from .models import PagePayload, PageResult, ScheduleEntry
from .normalizer import NormalizationLayer

log = get_logger(__name__)


class ScheduleParser:
    """Runs layout reconstruction, entry extraction and assembly over pages."""

    def __init__(
        self,
        normalization: Optional[NormalizationLayer] = None,
        layout: Optional[LayoutReconstructor] = None,
        extractor: Optional[EntryExtractor] = None,
    ):
        """
        Initialize the parser.

        Args:
            normalization: Vocabularies (defaults to the shared built-in layer)
            layout: Layout reconstructor (default tolerances if omitted)
            extractor: Entry extractor (default grammars if omitted)
        """
        self.normalization = normalization or NormalizationLayer.default()
        self.layout = layout or LayoutReconstructor()
        self.extractor = extractor or EntryExtractor()

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> 'ScheduleParser':
        return cls(
            normalization=NormalizationLayer.default(settings.fuzzy_threshold),
            layout=LayoutReconstructor(
                column_tolerance=settings.column_tolerance,
                line_tolerance=settings.line_tolerance,
            ),
            extractor=EntryExtractor(remap_ambiguous_hours=settings.remap_ambiguous_hours),
        )

    def reconstruct(self, payload: PagePayload) -> Dict[str, List[str]]:
        """Day label -> lines for one page."""
        return self.layout.reconstruct(payload)

    def parse(self, payload: PagePayload, location: str) -> List[ScheduleEntry]:
        """
        Parse a single page.

        Args:
            payload: Positioned fragments or flat text
            location: Studio location every entry on the page belongs to

        Returns:
            Entries sorted by weekday then time
        """
        return self.parse_pages([payload], location)

    def parse_pages(
        self,
        pages: Iterable[Union[PagePayload, PageResult]],
        location: str,
    ) -> List[ScheduleEntry]:
        """
        Parse several pages into one deduplicated schedule.

        Failed pages are skipped; duplicates across pages keep their first
        occurrence.

        Args:
            pages: Page payloads or PageResult objects
            location: Studio location for every entry

        Returns:
            Entries sorted by weekday then time
        """
        seen_keys = frozenset()
        entries: List[ScheduleEntry] = []

        for page_number, page in enumerate(pages, start=1):
            if isinstance(page, PageResult):
                if not page.ok:
                    log.warning("page_skipped", page=page.page_number, error=page.error)
                    continue
                page_number, page = page.page_number, page.payload

            by_day = self.reconstruct(page)
            if not by_day:
                log.info("page_without_schedule", page=page_number)
                continue

            triples = (
                (day, raw, location)
                for day, lines in by_day.items()
                for line in lines
                for raw in self.extractor.extract(line)
            )
            result = assemble_entries(triples, self.normalization, seen_keys)
            seen_keys = result.seen_keys
            entries.extend(result.entries)

            log.info("page_parsed", page=page_number, days=len(by_day),
                     entries=len(result.entries), duplicates=result.duplicates)

        return sort_entries(entries)


def parse_schedule_text(text: str, location: str,
                        parser: Optional[ScheduleParser] = None) -> List[ScheduleEntry]:
    """Parse flat OCR text for one location with the default parser."""
    return (parser or ScheduleParser()).parse(text, location)
