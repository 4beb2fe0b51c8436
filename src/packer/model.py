# src/packer/model.py (Pack Layer)
import base64
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PackError(Exception):
    """
    Raised when reading the input or writing the output fails.
    The originating OSError is kept as __cause__.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SearchContext(BaseModel):
    """
    Where references are looked up for a single pack operation.
    The base directory is tried first, then the search paths in the given order.
    """
    model_config = ConfigDict(frozen=True)

    base_directory: str = ""
    search_paths: List[str] = Field(default_factory=list)


class EmbeddedResource(BaseModel):
    path: str
    content_type: str
    data: bytes

    @property
    def data_uri(self) -> str:
        """The textual form that replaces the original reference."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class WarningKind(str, Enum):
    NOT_FOUND = "not_found"
    UNREADABLE = "unreadable"
    FOREIGN_NAMESPACE = "foreign_namespace"
    DESTINATION_EXISTS = "destination_exists"


class PackWarning(BaseModel):
    """A recoverable condition met while packing one file."""
    kind: WarningKind
    message: str  # Human-readable diagnostic line
    reference: Optional[str] = None
    path: Optional[str] = None

    @classmethod
    def not_found(cls, reference: str) -> "PackWarning":
        return cls(kind=WarningKind.NOT_FOUND, message=f"not found: img src={reference}", reference=reference)

    @classmethod
    def unreadable(cls, reference: str, path: str) -> "PackWarning":
        return cls(
            kind=WarningKind.UNREADABLE,
            message=f"unreadable: img src={reference} ({path})",
            reference=reference,
            path=path,
        )

    @classmethod
    def foreign_namespace(cls, namespace: Optional[str], name: str) -> "PackWarning":
        return cls(
            kind=WarningKind.FOREIGN_NAMESPACE,
            message=f"skipped {namespace or 'unknown'} element {name}",
        )

    @classmethod
    def destination_exists(cls, destination: str) -> "PackWarning":
        return cls(
            kind=WarningKind.DESTINATION_EXISTS,
            message=f"output file already exists: {destination}, use -w to overwrite it",
            path=destination,
        )


class PackRequest(BaseModel):
    input_path: str
    output_dir: str
    overwrite: bool = False
    search_paths: List[str] = Field(default_factory=list)


class PackStatus(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"


class PackResult(BaseModel):
    input_path: str
    destination: str
    status: PackStatus
    warnings: List[PackWarning] = Field(default_factory=list)
    inlined_count: int = 0


class BatchFailure(BaseModel):
    input_path: str
    message: str


class BatchReport(BaseModel):
    """Outcome of packing several inputs one after the other."""
    results: List[PackResult] = Field(default_factory=list)
    # One entry per failed input, in input order; only filled when the batch keeps going
    failures: List[BatchFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
