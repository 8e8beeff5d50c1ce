from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class DocumentAnalysis:
    """Structured result of the analysis stage."""

    document_type: str
    summary: str
    key_entities: list[str] = field(default_factory=list)
    legal_implications: list[str] = field(default_factory=list)
    recommended_actions: list[str] = field(default_factory=list)
    confidence: float = 0.0

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class EntitySet:
    people: list[str] = field(default_factory=list)
    organizations: list[str] = field(default_factory=list)
    dates: list[str] = field(default_factory=list)
    amounts: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return asdict(self)

    @property
    def is_empty(self) -> bool:
        return not any(self.to_dict().values())
