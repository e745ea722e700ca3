# ABOUTME: Metadata package: canonical record model, provider adapters, and parsing helpers.
# ABOUTME: Exports the Record schema and the provider protocol used throughout bibresolve.

from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.provider import Lookup, MetadataProvider
from bibresolve.metadata.types import Annotation, Attempt, Author, Record, record_to_dict

__all__ = [
    "Annotation",
    "Attempt",
    "Author",
    "Lookup",
    "MetadataProvider",
    "Record",
    "normalize_isbn",
    "record_to_dict",
]
