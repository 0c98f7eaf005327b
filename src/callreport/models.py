"""Data models for call reporting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

NOT_AVAILABLE = "N/A"

SUMMARY_HEADERS = [
    "Filename",
    "Duration",
    "Has Transcription",
    "Has Analysis",
    "Timestamp",
    "Phone Number",
    "Call Type",
    "Gender",
    "Sentiment",
    "Confidence",
    "Emotional State",
    "Rapport Score",
    "Call Tags",
    "Call Tags Count",
    "Payment Intent",
    "Next Best Action",
    "To-Do",
    "Concerns Count",
    "Conversion Probability",
    "Urgency Level",
    "Missed Opportunity",
]

OVERVIEW_HEADERS = [
    "Folder",
    "Total Calls",
    "Unique Phone Numbers",
    "Calls > 1:00",
    "Incoming",
    "Outgoing",
    "Unique Outgoing >1:00",
    "Total Talk Time",
]

HOURLY_HEADERS = ["Hour", "Total Minutes", "Calls"]

BUCKET_NAMES = ("outgoing", "incoming", "deactivation")


@dataclass
class Segment:
    start: float
    end: float
    text: str


@dataclass
class FileEntry:
    path: str
    name: str
    extension: str
    is_directory: bool


@dataclass(frozen=True)
class CallMetadata:
    timestamp: str = NOT_AVAILABLE
    phone_number: str = NOT_AVAILABLE
    call_type: str = NOT_AVAILABLE

    def as_json(self) -> Dict[str, str]:
        return {
            "callType": self.call_type,
            "timestamp": self.timestamp,
            "phoneNumber": self.phone_number,
        }


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass
class AgentFeedback:
    rapport_score: Any = None
    missed_opportunity: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "AgentFeedback":
        data = _as_dict(data)
        return cls(
            rapport_score=data.get("rapport_score"),
            missed_opportunity=data.get("missed_opportunity"),
        )


@dataclass
class AdvancedInsights:
    emotional_state: Any = None
    conversion_probability: Any = None
    urgency_level: Any = None
    agent_feedback: AgentFeedback = field(default_factory=AgentFeedback)

    @classmethod
    def from_dict(cls, data: Any) -> "AdvancedInsights":
        data = _as_dict(data)
        return cls(
            emotional_state=data.get("emotional_state"),
            conversion_probability=data.get("conversion_probability"),
            urgency_level=data.get("urgency_level"),
            agent_feedback=AgentFeedback.from_dict(data.get("agent_feedback")),
        )


@dataclass
class AnalysisRecord:
    """Partial view over an ``_analysis.json`` sidecar.

    Every nested path is optional. ``raw`` keeps the decoded document so the
    grouped JSON output can carry fields this model does not know about.
    """

    raw: Dict[str, Any] = field(default_factory=dict)
    gender: Any = None
    sentiment: Any = None
    confidence: Any = None
    call_tags: Optional[List[Any]] = None
    concerns: Optional[List[Any]] = None
    payment_intent: Any = None
    next_best_action: Any = None
    todo: Optional[List[Any]] = None
    advanced_insights: AdvancedInsights = field(default_factory=AdvancedInsights)

    @classmethod
    def from_dict(cls, data: Any) -> "AnalysisRecord":
        data = _as_dict(data)

        def _list(key: str) -> Optional[List[Any]]:
            value = data.get(key)
            return value if isinstance(value, list) else None

        return cls(
            raw=data,
            gender=data.get("gender"),
            sentiment=data.get("sentiment"),
            confidence=data.get("confidence"),
            call_tags=_list("call_tags"),
            concerns=_list("concerns"),
            payment_intent=data.get("payment_intent"),
            next_best_action=data.get("next_best_action"),
            todo=_list("todo"),
            advanced_insights=AdvancedInsights.from_dict(data.get("advanced_insights")),
        )

    def tag_names(self) -> List[str]:
        """Trimmed, non-empty tag names de-duplicated case-insensitively."""
        seen = set()
        names: List[str] = []
        for item in self.call_tags or []:
            if isinstance(item, dict):
                value = item.get("tag")
            else:
                value = item
            if value is None:
                continue
            name = str(value).strip()
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            names.append(name)
        return names


@dataclass
class SummaryRow:
    filename: str
    duration: str
    has_transcription: bool
    has_analysis: bool
    metadata: CallMetadata
    gender: str = ""
    sentiment: str = ""
    confidence: str = ""
    emotional_state: str = ""
    rapport_score: str = ""
    call_tags: str = ""
    call_tags_count: str = ""
    payment_intent: str = ""
    next_best_action: str = ""
    todo: str = ""
    concerns_count: str = ""
    conversion_probability: str = ""
    urgency_level: str = ""
    missed_opportunity: str = ""
    analysis: Optional[AnalysisRecord] = None
    classification: Optional[str] = None

    def csv_values(self) -> List[str]:
        return [
            self.filename,
            self.duration,
            "Yes" if self.has_transcription else "No",
            "Yes" if self.has_analysis else "No",
            self.metadata.timestamp,
            self.metadata.phone_number,
            self.metadata.call_type,
            self.gender,
            self.sentiment,
            self.confidence,
            self.emotional_state,
            self.rapport_score,
            self.call_tags,
            self.call_tags_count,
            self.payment_intent,
            self.next_best_action,
            self.todo,
            self.concerns_count,
            self.conversion_probability,
            self.urgency_level,
            self.missed_opportunity,
        ]

    def bucket_entry(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = dict(self.analysis.raw) if self.analysis else {}
        entry["filename"] = self.filename
        entry.update(self.metadata.as_json())
        entry["duration"] = self.duration
        return entry


@dataclass
class FolderResult:
    folder: str
    rows: List[SummaryRow] = field(default_factory=list)
    buckets: Dict[str, List[Dict[str, Any]]] = field(
        default_factory=lambda: {name: [] for name in BUCKET_NAMES}
    )


@dataclass
class OverviewRow:
    folder: str
    total_calls: int
    unique_phones: int
    calls_over_1min: int
    incoming: int
    outgoing: int
    unique_outgoing_long: int
    total_talk_time: str

    def csv_values(self) -> List[str]:
        return [
            self.folder,
            str(self.total_calls),
            str(self.unique_phones),
            str(self.calls_over_1min),
            str(self.incoming),
            str(self.outgoing),
            str(self.unique_outgoing_long),
            self.total_talk_time,
        ]


@dataclass
class HourBucket:
    hour: int
    total_seconds: int = 0
    calls: int = 0

    @property
    def label(self) -> str:
        return f"{self.hour:02d}:00-{(self.hour + 1) % 24:02d}:00"

    def csv_values(self) -> List[str]:
        return [self.label, f"{self.total_seconds / 60:.2f}", str(self.calls)]


@dataclass
class OverviewReport:
    base_folder: str
    rows: List[OverviewRow] = field(default_factory=list)
    hours: List[HourBucket] = field(default_factory=list)
    summary_files: List[str] = field(default_factory=list)
    buckets: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
