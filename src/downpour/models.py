from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Category(str, Enum):
    SUCCESS = "Success"
    HTTP = "HTTP"
    UNKNOWN = "Unknown"
    TOO_MANY_FILES = "Too many open files"
    CONNECTION_REJECTED = "Connection reset by peer"
    CONNECTION_REFUSED = "Connection refused"
    NO_SUCH_HOST = "No such host"
    BROKEN_PIPE = "Broken pipe"
    SERVER_DISCONNECTED = "Server disconnected"
    TIMEOUT = "Timeout"

    @property
    def label(self) -> str:
        return self.value


class PrintMode(str, Enum):
    INLINE = "inline"
    MULTILINE = "multiline"
    BAR = "bar"


@dataclass(frozen=True)
class Token:
    seq: int


@dataclass(frozen=True)
class Outcome:
    category: Category
    status_code: Optional[int] = None

    def __post_init__(self):
        if (self.category is Category.HTTP) != (self.status_code is not None):
            raise ValueError(
                f"status_code must be set exactly for HTTP outcomes, got {self.category.name} / {self.status_code}"
            )

    @property
    def ok(self) -> bool:
        return self.category is Category.SUCCESS


@dataclass
class ProgramArgs:
    url: str
    concurrency: int = 1
    total_requests: int = 1
    print_mode: PrintMode = PrintMode.INLINE

    def __post_init__(self):
        if not self.url:
            raise ValueError("url must not be empty")
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.total_requests < 0:
            raise ValueError(f"total_requests must be >= 0, got {self.total_requests}")
        self.print_mode = PrintMode(self.print_mode)

    @property
    def effective_concurrency(self) -> int:
        return min(self.concurrency, self.total_requests)


@dataclass
class RunReport:
    total_requests: int
    workers: int
    success: int
    failed: int
    per_category: dict[Category, int] = field(default_factory=dict)
    per_status_code: dict[int, int] = field(default_factory=dict)
    elapsed: float = 0.0
    cancelled: bool = False

    @property
    def completed(self) -> int:
        return self.success + self.failed

    @property
    def error_rate(self) -> float:
        return self.failed / self.completed if self.completed else 0.0


# Ordered (signature, category) pairs; earlier entries win.
SignatureTable = tuple[tuple[str, Category], ...]
