"""Album identity resolution: overrides, similarity, duplicate scans and curation."""

from __future__ import annotations

from .curation import CatalogCurator, MergeResult, fill_missing_metadata
from .exclusions import ExclusionPair, ExclusionSet
from .lookup_cache import CatalogLookupCache
from .normalize import (
    normalize_for_comparison,
    normalize_for_external_api,
    normalize_query_key,
    sanitize_for_storage,
)
from .overrides import CanonicalValueResolver, ListEntryDraft
from .scan import (
    CandidatePair,
    DuplicateScanEngine,
    IntegrityIssue,
    IssueKind,
    ManualAlbumMatches,
    ManualAuditReport,
    ScanReport,
    ScanSettings,
    Severity,
    SimilarMatch,
    find_candidate_pairs,
)
from .similarity import (
    ConfidenceBand,
    PairScore,
    confidence_band,
    score_pair,
    similarity,
    validate_threshold,
)

__all__ = [
    "CandidatePair",
    "CanonicalValueResolver",
    "CatalogCurator",
    "CatalogLookupCache",
    "ConfidenceBand",
    "DuplicateScanEngine",
    "ExclusionPair",
    "ExclusionSet",
    "IntegrityIssue",
    "IssueKind",
    "ListEntryDraft",
    "ManualAlbumMatches",
    "ManualAuditReport",
    "MergeResult",
    "PairScore",
    "ScanReport",
    "ScanSettings",
    "Severity",
    "SimilarMatch",
    "confidence_band",
    "fill_missing_metadata",
    "find_candidate_pairs",
    "normalize_for_comparison",
    "normalize_for_external_api",
    "normalize_query_key",
    "sanitize_for_storage",
    "score_pair",
    "similarity",
    "validate_threshold",
]
