"""Clients for external collaborators: object storage and receipt extraction."""

from neopay.integrations.extraction import (
    ExtractedItem,
    ExtractedReceipt,
    ExtractionError,
    HttpReceiptExtractor,
    ReceiptExtractor,
    UnconfiguredExtractor,
    build_extractor,
)
from neopay.integrations.storage import (
    LocalFileStorage,
    ObjectStorage,
    StoredObject,
    SupabaseStorage,
    build_storage,
    decode_upload_payload,
    receipt_object_path,
)

__all__ = [
    "ExtractedItem",
    "ExtractedReceipt",
    "ExtractionError",
    "HttpReceiptExtractor",
    "LocalFileStorage",
    "ObjectStorage",
    "ReceiptExtractor",
    "StoredObject",
    "SupabaseStorage",
    "UnconfiguredExtractor",
    "build_extractor",
    "build_storage",
    "decode_upload_payload",
    "receipt_object_path",
]
