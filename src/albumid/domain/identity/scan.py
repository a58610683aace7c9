"""Pairwise duplicate scans over the catalog and manual-entry audits.

Both scans compare every eligible pair in memory, which is quadratic in catalog size.
That is acceptable for catalogs of a few thousand albums; larger catalogs would need
blocking (for example by normalised artist) before scoring.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from albumid.domain.errors import InvalidInputError
from albumid.domain.model import CanonicalRecord

from .exclusions import ExclusionPair, ExclusionSet
from .normalize import is_blank, normalize_for_comparison
from .similarity import PairScore, rank_matches, score_texts, validate_threshold
from .similarity import meets_threshold as _meets_threshold

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from albumid.domain.model import ListUsage
    from albumid.domain.ports.unit_of_work import CatalogUnitOfWork

log = getLogger(__name__)


class _Unset(Enum):
    TOKEN = 0


_UNSET: Final = _Unset.TOKEN


@dataclass(slots=True, frozen=True)
class ScanSettings:
    default_threshold: float = 0.15
    max_pairs: int | None = 100
    manual_max_matches: int = 5
    similar_limit: int = 3


@dataclass(slots=True, frozen=True)
class CandidatePair:
    record_a: CanonicalRecord
    record_b: CanonicalRecord
    score: PairScore

    @property
    def key(self) -> ExclusionPair:
        return ExclusionPair.of(self.record_a.id, self.record_b.id)

    @property
    def confidence(self) -> float:
        return self.score.confidence


@dataclass(slots=True, frozen=True)
class ScanReport:
    pairs: list[CandidatePair]
    total_records: int
    excluded_pairs: int
    total_candidates: int
    suppressed_pairs: int = 0


@dataclass(slots=True, frozen=True)
class SimilarMatch:
    record: CanonicalRecord
    score: PairScore


class Severity(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.HIGH: 0,
    Severity.MEDIUM: 1,
    Severity.LOW: 2,
}


class IssueKind(StrEnum):
    ORPHANED_REFERENCE = "orphaned_reference"
    DANGLING_LIST = "dangling_list"
    MISSING_METADATA = "missing_metadata"
    DUPLICATE_MANUAL = "duplicate_manual"


class FixAction(StrEnum):
    DELETE_REFERENCES = "delete_references"
    MANUAL_REVIEW = "manual_review"
    MERGE = "merge"


@dataclass(slots=True, frozen=True)
class IntegrityIssue:
    kind: IssueKind
    severity: Severity
    message: str
    album_ids: tuple[str, ...] = ()
    list_id: str | None = None
    references: int = 0
    fix_action: FixAction = FixAction.MANUAL_REVIEW


@dataclass(slots=True, frozen=True)
class ManualAlbumMatches:
    record: CanonicalRecord
    matches: list[SimilarMatch]
    used_in: list[ListUsage]

    @property
    def top_confidence(self) -> float:
        return self.matches[0].score.confidence if self.matches else 0.0


@dataclass(slots=True, frozen=True)
class ManualAuditReport:
    manual_albums: list[ManualAlbumMatches]
    total_manual: int
    integrity_issues: list[IntegrityIssue] = field(default_factory=list)

    @property
    def total_with_matches(self) -> int:
        return len(self.manual_albums)

    @property
    def total_integrity_issues(self) -> int:
        return len(self.integrity_issues)


def find_candidate_pairs(
    records: Sequence[CanonicalRecord],
    threshold: float,
    exclusions: ExclusionSet,
) -> tuple[list[CandidatePair], int]:
    """Compare every unordered pair once, best candidates first.

    Returns the candidates and how many otherwise-qualifying pairs were suppressed by
    the exclusion set.
    """

    limit = validate_threshold(threshold)
    eligible = [record for record in records if record.has_identity_text]
    pairs: list[CandidatePair] = []
    suppressed = 0
    for index, record_a in enumerate(eligible):
        for record_b in eligible[index + 1 :]:
            if record_a.id == record_b.id:
                continue
            score = score_texts(record_a.artist, record_a.title, record_b.artist, record_b.title)
            if not _meets_threshold(score.confidence, limit):
                continue
            if exclusions.excludes(record_a.id, record_b.id):
                suppressed += 1
                continue
            first, second = sorted((record_a, record_b), key=lambda record: record.id)
            pairs.append(CandidatePair(record_a=first, record_b=second, score=score))
    pairs.sort(key=lambda pair: (-pair.confidence, pair.record_a.id, pair.record_b.id))
    return pairs, suppressed


class DuplicateScanEngine:
    """Read-only scans that surface likely duplicates for an operator."""

    def __init__(
        self,
        unit_of_work_factory: Callable[[], CatalogUnitOfWork],
        settings: ScanSettings | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._settings = settings or ScanSettings()

    @property
    def settings(self) -> ScanSettings:
        return self._settings

    def scan(
        self,
        threshold: float | None = None,
        limit: int | None | _Unset = _UNSET,
    ) -> ScanReport:
        """Return candidate pairs at ``threshold``, most likely duplicates first.

        ``limit`` defaults to the configured page size; pass ``None`` for every pair.
        """

        effective = validate_threshold(
            self._settings.default_threshold if threshold is None else threshold
        )
        max_pairs = self._settings.max_pairs if limit is _UNSET else limit
        if max_pairs is not None and (
            isinstance(max_pairs, bool) or not isinstance(max_pairs, int) or max_pairs < 0
        ):
            raise InvalidInputError(f"limit must be a non-negative integer, got {max_pairs!r}")

        with self._uow_factory() as uow:
            records = uow.repositories.albums.list_all()
            exclusions = ExclusionSet(uow.repositories.exclusions.list_all())

        pairs, suppressed = find_candidate_pairs(records, effective, exclusions)
        log.info(
            "Duplicate scan: records=%s threshold=%.2f candidates=%s suppressed=%s",
            len(records),
            effective,
            len(pairs),
            suppressed,
        )
        return ScanReport(
            pairs=pairs if max_pairs is None else pairs[:max_pairs],
            total_records=len(records),
            excluded_pairs=len(exclusions),
            total_candidates=len(pairs),
            suppressed_pairs=suppressed,
        )

    def check_similar(
        self,
        artist: str,
        title: str,
        *,
        exclude_id: str | None = None,
        threshold: float | None = None,
        limit: int | None = None,
    ) -> list[SimilarMatch]:
        """Find catalog records resembling a prospective new album."""

        if is_blank(artist) or is_blank(title):
            raise InvalidInputError("artist and title are required")
        effective = validate_threshold(
            self._settings.default_threshold if threshold is None else threshold
        )
        max_matches = self._settings.similar_limit if limit is None else limit

        with self._uow_factory() as uow:
            records = uow.repositories.albums.list_all()

        candidates = [
            record for record in records if record.has_identity_text and record.id != exclude_id
        ]
        prospective = CanonicalRecord(id="", artist=artist, title=title)
        ranked = rank_matches(prospective, candidates, effective)
        return [SimilarMatch(record=record, score=score) for record, score in ranked[:max_matches]]

    def audit_manual(self, threshold: float | None = None) -> ManualAuditReport:
        """Pair every manual album against canonical albums and sweep integrity issues."""

        effective = validate_threshold(
            self._settings.default_threshold if threshold is None else threshold
        )

        with self._uow_factory() as uow:
            repositories = uow.repositories
            records = repositories.albums.list_all()
            exclusions = ExclusionSet(repositories.exclusions.list_all())
            manual = [record for record in records if record.is_manual]
            usages = repositories.entries.usages(record.id for record in manual)
            orphaned = repositories.entries.orphaned_album_ids()
            dangling = repositories.entries.dangling_list_ids()

        canonical = [
            record
            for record in records
            if not record.is_manual and not record.is_internal and record.has_identity_text
        ]

        with_matches: list[ManualAlbumMatches] = []
        for record in manual:
            if not record.has_identity_text:
                continue
            candidates = [
                candidate
                for candidate in canonical
                if not exclusions.excludes(record.id, candidate.id)
            ]
            ranked = rank_matches(record, candidates, effective)
            if not ranked:
                continue
            matches = [
                SimilarMatch(record=candidate, score=score)
                for candidate, score in ranked[: self._settings.manual_max_matches]
            ]
            with_matches.append(
                ManualAlbumMatches(
                    record=record,
                    matches=matches,
                    used_in=usages.get(record.id, []),
                )
            )
        with_matches.sort(key=lambda item: (-item.top_confidence, item.record.id))

        issues = _integrity_issues(manual, orphaned, dangling)
        log.info(
            "Manual audit: manual=%s with_matches=%s issues=%s",
            len(manual),
            len(with_matches),
            len(issues),
        )
        return ManualAuditReport(
            manual_albums=with_matches,
            total_manual=len(manual),
            integrity_issues=issues,
        )


def _integrity_issues(
    manual: Sequence[CanonicalRecord],
    orphaned: dict[str, int],
    dangling: dict[str, int],
) -> list[IntegrityIssue]:
    issues: list[IntegrityIssue] = [
        IntegrityIssue(
            kind=IssueKind.ORPHANED_REFERENCE,
            severity=Severity.HIGH,
            message=f"{count} list entries reference missing album {album_id}",
            album_ids=(album_id,),
            references=count,
            fix_action=FixAction.DELETE_REFERENCES,
        )
        for album_id, count in sorted(orphaned.items())
    ]
    issues.extend(
        IntegrityIssue(
            kind=IssueKind.DANGLING_LIST,
            severity=Severity.HIGH,
            message=f"{count} list entries belong to missing list {list_id}",
            list_id=list_id,
            references=count,
            fix_action=FixAction.MANUAL_REVIEW,
        )
        for list_id, count in sorted(dangling.items())
    )

    groups: defaultdict[tuple[str, str], list[str]] = defaultdict(list)
    for record in manual:
        if not record.has_identity_text:
            missing = [name for name in ("artist", "title") if is_blank(getattr(record, name))]
            issues.append(
                IntegrityIssue(
                    kind=IssueKind.MISSING_METADATA,
                    severity=Severity.MEDIUM,
                    message=f"Manual album {record.id} is missing {', '.join(missing)}",
                    album_ids=(record.id,),
                )
            )
            continue
        key = (normalize_for_comparison(record.artist), normalize_for_comparison(record.title))
        groups[key].append(record.id)

    for (artist, title), album_ids in sorted(groups.items()):
        if len(album_ids) < 2:  # noqa: PLR2004
            continue
        issues.append(
            IntegrityIssue(
                kind=IssueKind.DUPLICATE_MANUAL,
                severity=Severity.LOW,
                message=f"{len(album_ids)} manual albums share {artist!r} / {title!r}",
                album_ids=tuple(sorted(album_ids)),
                fix_action=FixAction.MERGE,
            )
        )

    issues.sort(key=lambda issue: issue.severity.rank)
    return issues
