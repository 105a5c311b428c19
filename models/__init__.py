"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, ScanStats
from models.variant import KeyField, VariantRecord
from models.reconciliation import (
    KeyGroup,
    ClassificationResult,
    ValuePartition,
    DuplicateKeyReport,
    MissingKeyReport,
)
from models.reference import (
    ReferenceRow,
    MissingSide,
    ReferenceMatch,
    ReferenceComparison,
    ReferenceParseResult,
    CSVComparisonResponse,
)
from models.bulk_action import (
    BulkActionType,
    ActionState,
    BulkActionRequest,
    MutationBatch,
    FailedBatch,
    BulkActionResult,
    BulkActionPreview,
    BulkActionStatus,
    DeleteProductRequest,
    DeleteProductResponse,
)
from models.best_sellers import (
    ProductSales,
    CollectionSummary,
    BestSellersReport,
    CollectionAssignMode,
    CollectionAssignRequest,
    CollectionAssignResponse,
)
from models.fulfilment import (
    FulfilFromFailure,
    FulfilFromNotFound,
    FulfilFromAssignResult,
    FulfilFromReport,
)

__all__ = [
    # Base
    "BaseSchema",
    "ScanStats",

    # Variants
    "KeyField",
    "VariantRecord",

    # Classification
    "KeyGroup",
    "ClassificationResult",
    "ValuePartition",
    "DuplicateKeyReport",
    "MissingKeyReport",

    # Reference CSV
    "ReferenceRow",
    "MissingSide",
    "ReferenceMatch",
    "ReferenceComparison",
    "ReferenceParseResult",
    "CSVComparisonResponse",

    # Bulk actions
    "BulkActionType",
    "ActionState",
    "BulkActionRequest",
    "MutationBatch",
    "FailedBatch",
    "BulkActionResult",
    "BulkActionPreview",
    "BulkActionStatus",
    "DeleteProductRequest",
    "DeleteProductResponse",

    # Best sellers
    "ProductSales",
    "CollectionSummary",
    "BestSellersReport",
    "CollectionAssignMode",
    "CollectionAssignRequest",
    "CollectionAssignResponse",

    # Fulfil from
    "FulfilFromFailure",
    "FulfilFromNotFound",
    "FulfilFromAssignResult",
    "FulfilFromReport",
]
