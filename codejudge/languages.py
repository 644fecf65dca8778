"""Catalogue of submission languages and which of them can be executed."""

from dataclasses import dataclass, field
from typing import List

DEFAULT_LANGUAGE = "javascript"


@dataclass
class Language:
    id: str
    name: str
    extension: str
    supported: bool
    features: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "extension": self.extension,
            "supported": self.supported,
            "features": list(self.features),
        }


LANGUAGES = [
    Language("javascript", "JavaScript", ".js", True,
             ["Syntax validation", "Code execution", "Basic formatting"]),
    Language("python", "Python", ".py", False, ["Coming soon..."]),
    Language("java", "Java", ".java", False, ["Coming soon..."]),
    Language("cpp", "C++", ".cpp", False, ["Coming soon..."]),
]

LANGUAGES_MESSAGE = "Currently only JavaScript is fully supported"


def is_supported(language_id: str) -> bool:
    """Return True if submissions in this language can be executed."""
    return any(lang.id == language_id and lang.supported for lang in LANGUAGES)
