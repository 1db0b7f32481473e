"""Template documents as held by the template index."""

from __future__ import annotations

import unicodedata

from pydantic import BaseModel


class TemplateDocument(BaseModel):
    """One template file. ``id`` and ``path`` are the same vault path."""

    model_config = {"frozen": True}

    id: str
    name: str
    path: str
    content: str

    @classmethod
    def from_file(cls, path: str, name: str, content: str) -> TemplateDocument:
        return cls(id=path, name=name, path=path, content=content)


def template_sort_key(template: TemplateDocument) -> str:
    """Ordering key by name, ignoring case and accents.

    Examples:
        >>> names = ["Zebra", "Éclair", "apple"]
        >>> docs = [TemplateDocument.from_file(f"T/{n}.md", n, "") for n in names]
        >>> [doc.name for doc in sorted(docs, key=template_sort_key)]
        ['apple', 'Éclair', 'Zebra']
    """
    decomposed = unicodedata.normalize("NFKD", template.name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
