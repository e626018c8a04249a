"""
Archetype model — the structural shape of a generated handler.
"""

from __future__ import annotations

from enum import Enum


class Archetype(str, Enum):
    CRUD = "crud"
    CREDENTIAL = "credential"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    READ = "read"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def param_name(self) -> str:
        """Dynamic route parameter used when the path is dynamic."""
        return "imageId" if self is Archetype.DOWNLOAD else "id"

    @property
    def forces_nested(self) -> bool:
        return self is Archetype.DOWNLOAD

    @property
    def forces_dynamic(self) -> bool:
        return self is Archetype.DOWNLOAD

    @property
    def uses_filesystem(self) -> bool:
        return self in (Archetype.DOWNLOAD, Archetype.UPLOAD)

    @property
    def tracks_client(self) -> bool:
        """Whether the handler records the caller's network address."""
        return self in (Archetype.DOWNLOAD, Archetype.UPLOAD)

    @property
    def verifies_credentials(self) -> bool:
        return self is Archetype.CREDENTIAL


_LABELS = {
    Archetype.CRUD: "full CRUD",
    Archetype.CREDENTIAL: "credential verification",
    Archetype.DOWNLOAD: "tracked download",
    Archetype.UPLOAD: "multipart upload",
    Archetype.READ: "plain read",
}
