from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    STYLE = "STYLE"


class Correction(BaseModel):
    start: int
    end: int
    replacement: str


class LintIssue(BaseModel):
    severity: Severity
    file_path: str
    line_number: int
    column: int
    rule_id: str
    message: str
    correction: Optional[Correction] = None
    auto_fixable: bool = False
    corrected: bool = False


class FileReport(BaseModel):
    file_path: str
    issues: List[LintIssue] = Field(default_factory=list)
    parse_errors: List[str] = Field(default_factory=list)
    error: Optional[str] = None


class LintReport(BaseModel):
    files: List[FileReport] = Field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return sum(len(f.issues) for f in self.files)

    @property
    def offense_count(self) -> int:
        return sum(1 for f in self.files for i in f.issues if not i.corrected)
