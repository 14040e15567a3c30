"""
suppliers/models.py -- Domain dataclass for the supplier registry.

Pure data container with zero logic. Persistence lives in suppliers/store.py,
request validation in api/validation.py.
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass
class Supplier:
    """A named party identified by a document number.

    id is the primary key and never changes once the row exists.
    document is a fixed-format identifier such as a national tax ID
    (at most 14 characters).
    """

    id: UUID
    name: str
    document: str
    active: bool = False
