from dataclasses import dataclass
from enum import Enum
import re

class CandidateKind(str, Enum):
    RAW_TEXT = "raw_text"
    SQL_STATEMENT = "sql_statement"

_FENCE = re.compile(r"^```(?:sql)?\s*|\s*```$", re.IGNORECASE)
_SELECT = re.compile(r"^select\b", re.IGNORECASE)

def has_unquoted_semicolon(statement: str) -> bool:
    """True when a ; outside quotes splits the text into more than one statement"""
    quote = None
    for char in statement:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
        elif char == ";":
            return True
    return False

@dataclass(frozen=True)
class SQLCandidate:
    kind: CandidateKind
    body: str

    @property
    def is_sql(self) -> bool:
        return self.kind is CandidateKind.SQL_STATEMENT

    @classmethod
    def from_text(cls, text: str) -> "SQLCandidate":
        """Tag model output or a stored correction as SQL or plain text.

        Only a single statement starting with SELECT counts as SQL. Markdown
        fences and a trailing semicolon are stripped first.
        """
        body = _FENCE.sub("", (text or "").strip()).strip()
        statement = body.rstrip().rstrip(";").strip()
        if _SELECT.match(statement) and not has_unquoted_semicolon(statement):
            return cls(CandidateKind.SQL_STATEMENT, statement)
        return cls(CandidateKind.RAW_TEXT, body)

    def with_body(self, body: str) -> "SQLCandidate":
        return SQLCandidate(self.kind, body)
