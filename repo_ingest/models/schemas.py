from dataclasses import dataclass, field
from typing import Callable, List
from pydantic import BaseModel, ConfigDict, Field


class RepoReference(BaseModel):
    """Repository and branch resolved from a GitHub URL."""
    model_config = ConfigDict(frozen=True)

    owner: str = Field(min_length=1)
    name: str = Field(min_length=1)
    branch: str = Field(min_length=1)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class ArchiveEntry:
    """Read-only view of one member of a downloaded archive.

    Content is read from the archive on access so that filtered-out
    members are never decompressed.
    """
    path: str
    is_directory: bool
    size: int
    loader: Callable[[], bytes] = field(repr=False, compare=False)

    @property
    def content(self) -> bytes:
        return self.loader()


class DocumentMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    repo: str
    branch: str


class Document(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    metadata: DocumentMetadata

    @classmethod
    def from_entry(cls, entry: ArchiveEntry, ref: RepoReference, content: str) -> "Document":
        return cls(
            id=entry.path,
            content=content,
            metadata=DocumentMetadata(path=entry.path, repo=ref.full_name, branch=ref.branch),
        )


class IngestionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    repo: str
    branch: str
    file_count: int
    documents: List[Document]

    @classmethod
    def from_documents(cls, ref: RepoReference, documents: List[Document]) -> "IngestionResult":
        return cls(
            repo=ref.full_name,
            branch=ref.branch,
            file_count=len(documents),
            documents=documents,
        )
