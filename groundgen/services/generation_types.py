"""Value types passed into and returned from the generation client."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GenerationRequest:
    """One generate() call. system_prompt is sent as separate instruction content."""

    user_prompt: str
    system_prompt: str | None = None
    enable_search_grounding: bool = False


@dataclass(frozen=True)
class Source:
    """A web citation attached to a grounded answer."""

    uri: str
    title: str


@dataclass(frozen=True)
class GenerationResult:
    """Generated text plus grounding sources, in upstream order."""

    text: str
    sources: tuple[Source, ...] = field(default_factory=tuple)
