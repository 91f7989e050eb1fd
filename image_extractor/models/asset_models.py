"""Models for discovered remote images, downloads and rewrite results."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List


@dataclass(frozen=True)
class RemoteImageUrl:
    """A remote image reference discovered in page text.

    Two references are the same image iff their ``href`` is equal. The
    ``literals`` keep every spelling of that href seen in the scanned text,
    first-seen first.
    """

    scheme: str
    host: str
    path: str
    query: str
    fragment: str
    href: str
    literals: tuple[str, ...]

    @property
    def literal(self) -> str:
        return self.literals[0]


@dataclass(frozen=True)
class DownloadOutcome:
    """Result of downloading one remote image to local storage."""

    url: RemoteImageUrl
    local_name: str
    destination: Path
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PageResult:
    """Rewritten HTML for one generated page."""

    route: str
    html: str
    outcomes: List[DownloadOutcome] = field(default_factory=list)
    replaced_count: int = 0


@dataclass
class PayloadResult:
    """Rewritten serialized page state for one route."""

    text: str
    outcomes: List[DownloadOutcome] = field(default_factory=list)
    replaced_count: int = 0
    path: Path | None = None


@dataclass
class DownloadFailure:
    """A download that did not land, reported in the run summary."""

    href: str
    reason: str


@dataclass
class SiteSummary:
    """Aggregated result of processing a whole generated site."""

    pages_processed: int = 0
    payloads_processed: int = 0
    images_downloaded: int = 0
    links_replaced: int = 0
    failures: List[DownloadFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def record(self, outcomes: List[DownloadOutcome], replaced_count: int) -> None:
        """Fold one page or payload result into the summary."""
        self.links_replaced += replaced_count
        for outcome in outcomes:
            if outcome.ok:
                self.images_downloaded += 1
            else:
                self.failures.append(
                    DownloadFailure(href=outcome.url.href, reason=outcome.error or "")
                )
