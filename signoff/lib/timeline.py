"""
Human-readable audit timeline for initiatives.

Every history entry recorded on an initiative is also appended to
initiatives/<key>/timeline.md. The markdown file is append-only; the
structured copy lives in state.yaml.
"""

from dataclasses import dataclass


# Separator between the timestamp and the label in entry headings
HEADING_SEPARATOR = " - "


@dataclass
class TimelineEvent:
    """A single audit event: label plus ordered key/value facts."""
    timestamp: str
    label: str
    facts: dict[str, str]

    def detail(self) -> str:
        """One-line rendering stored as the history entry's detail."""
        return "; ".join(f"{name}: {value}" for name, value in self.facts.items())


def format_header(key: str, title: str) -> str:
    """Opening block of a new timeline file."""
    return f"# Timeline: {key}\n\n## {title}\n\n---\n"


def format_entry(event: TimelineEvent) -> str:
    """Render one event as a markdown section, ending with a rule."""
    lines = [f"\n### {event.timestamp}{HEADING_SEPARATOR}{event.label}\n"]
    for name, value in event.facts.items():
        lines.append(f"- **{name}:** {value}")
    lines.append("\n---\n")
    return "\n".join(lines)
