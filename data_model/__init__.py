"""
data_model — struktury danych rekonstrukcji dokumentów rady miasta.

Moduły:
  layout  — TextFragment, Row, ColumnRole
  records — Member, VoteValue, VoteEntry, BillRecord, VotingDocument,
            QuestionItem, MemberQuestion, QuestionsDocument
  errors  — ReconstructionError i pochodne, SpeakerUnresolvedWarning
"""

from .layout import (
    ColumnRole,
    TextFragment,
    Row,
)
from .records import (
    NAME_SEPARATOR,
    VoteValue,
    Member,
    VoteEntry,
    BillRecord,
    VotingDocument,
    QuestionItem,
    MemberQuestion,
    QuestionsDocument,
    utc_timestamp,
)
from .errors import (
    IssueCode,
    ReconstructionError,
    LayoutError,
    NameExtractionError,
    BillParseError,
    CountMismatchError,
    SpeakerUnresolvedWarning,
)

__all__ = [
    # layout
    "ColumnRole",
    "TextFragment",
    "Row",
    # records
    "NAME_SEPARATOR",
    "VoteValue",
    "Member",
    "VoteEntry",
    "BillRecord",
    "VotingDocument",
    "QuestionItem",
    "MemberQuestion",
    "QuestionsDocument",
    "utc_timestamp",
    # errors
    "IssueCode",
    "ReconstructionError",
    "LayoutError",
    "NameExtractionError",
    "BillParseError",
    "CountMismatchError",
    "SpeakerUnresolvedWarning",
]
