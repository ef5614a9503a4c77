# SPDX-License-Identifier: MIT
"""Write path: per-point validation and batched carbon ingestion."""

from .batcher import WriteBatcher, encode_batch, encode_point
from .validation import Invalid, Valid, ValidationResult, WriteValidator, missing_field_message

__all__ = [
    "Invalid",
    "Valid",
    "ValidationResult",
    "WriteBatcher",
    "WriteValidator",
    "encode_batch",
    "encode_point",
    "missing_field_message",
]
