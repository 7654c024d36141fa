"""
Corpus Chunking

Turns the nested corpus into an ordered list of self-contained chunks, one
per logical fact (the bio, each course, each work project, ...). Each chunk
is embedded on its own, so a question like "did they take Java?" can match a
single course instead of a whole academic history.

Output order is fixed: bio, courses, extracurriculars, work (projects then
events per workplace, workplaces in source order), personal projects.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from portfolio_assistant.models.corpus import (
    Contact,
    Corpus,
    Course,
    Extracurricular,
    PersonalProject,
    Profile,
    WorkEvent,
    WorkProject,
)

logger = logging.getLogger(__name__)


class ChunkType(str, Enum):
    """Closed set of chunk categories, stored as ``metadata["type"]``."""

    BIO = "bio"
    COURSE = "course"
    EXTRACURRICULAR = "extracurricular"
    WORK_PROJECT = "work_project"
    WORK_EVENT = "work_event"
    PERSONAL_PROJECT = "personal_project"


@dataclass(frozen=True)
class Chunk:
    """
    One retrievable unit of text.
    """

    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def chunk_type(self) -> ChunkType:
        return ChunkType(self.metadata["type"])


def _text(value: Any) -> str:
    """Render a scalar for display; missing values become empty text."""
    if value is None:
        return ""
    return str(value)


def _joined(values: Optional[Iterable[Any]]) -> str:
    if not values:
        return ""
    return ", ".join(_text(v) for v in values)


def _metadata(chunk_type: ChunkType, **fields: Any) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"type": chunk_type.value}
    metadata.update({key: value for key, value in fields.items() if value is not None})
    return metadata


def _bio_chunk(profile: Optional[Profile], contact: Optional[Contact]) -> Chunk:
    profile = profile or Profile()
    contact = contact or Contact()
    content = "\n".join(
        [
            "PROFILE & CONTACT:",
            f"Name: {_text(profile.name)}",
            f"Role: {_text(profile.role)}",
            f"Bio: {_text(profile.bio)}",
            f"Email: {_text(contact.email)}",
            f"Phone: {_text(contact.phone)}",
            f"Links: LinkedIn ({_text(contact.linkedin)}), GitHub ({_text(contact.github)})",
        ]
    )
    return Chunk(content=content, metadata=_metadata(ChunkType.BIO))


def _course_chunk(course: Course) -> Chunk:
    content = "\n".join(
        [
            f"COURSE: {_text(course.identifier)} - {_text(course.title)} ({_text(course.year)})",
            f"Description: {_text(course.description)}",
            f"Accomplishments: {_joined(course.accomplishments)}",
            f"Tech Stack: {_joined(course.technology)}",
        ]
    )
    return Chunk(content=content, metadata=_metadata(ChunkType.COURSE, id=course.identifier))


def _extracurricular_chunk(activity: Extracurricular) -> Chunk:
    content = "\n".join(
        [
            f"EXTRACURRICULAR: {_text(activity.title)} at {_text(activity.org)}",
            f"Description: {_text(activity.description)}",
            f"Tech Stack: {_joined(activity.technology)}",
        ]
    )
    return Chunk(content=content, metadata=_metadata(ChunkType.EXTRACURRICULAR))


def _work_project_chunk(workplace: str, project: WorkProject) -> Chunk:
    content = "\n".join(
        [
            f"WORK PROJECT ({workplace}): {_text(project.name)}",
            f"Team Size: {_text(project.team_size)}",
            f"Description: {_text(project.description)}",
            f"Tech Stack: {_joined(project.technology)}",
        ]
    )
    return Chunk(
        content=content,
        metadata=_metadata(ChunkType.WORK_PROJECT, workplace=workplace),
    )


def _work_event_chunk(workplace: str, event: WorkEvent) -> Chunk:
    content = "\n".join(
        [
            f"WORK EVENT ({workplace}): {_text(event.name)}",
            f"Description: {_text(event.description)}",
        ]
    )
    return Chunk(
        content=content,
        metadata=_metadata(ChunkType.WORK_EVENT, workplace=workplace),
    )


def _personal_project_chunk(project: PersonalProject) -> Chunk:
    content = "\n".join(
        [
            f"PERSONAL PROJECT: {_text(project.title)}",
            f"Description: {_text(project.description)}",
            f"Tech Stack: {_joined(project.technology)}",
            f"Link: {_text(project.link)}",
            f"Category: {_joined(project.category)}",
        ]
    )
    return Chunk(
        content=content,
        metadata=_metadata(ChunkType.PERSONAL_PROJECT, title=project.title),
    )


def build_chunks(corpus: Union[Corpus, Mapping[str, Any]]) -> List[Chunk]:
    """
    Split a corpus into semantic chunks.

    Deterministic: the same corpus always yields the same chunks in the same
    order. Missing sections produce no chunks and missing fields render as
    empty text.

    Args:
        corpus: A Corpus record or the raw JSON mapping it is parsed from.

    Returns:
        Ordered list of chunks.
    """
    if not isinstance(corpus, Corpus):
        corpus = Corpus.model_validate(corpus)

    chunks: List[Chunk] = []

    if corpus.profile is not None or corpus.contact is not None:
        chunks.append(_bio_chunk(corpus.profile, corpus.contact))

    chunks.extend(_course_chunk(c) for c in corpus.academics.courses)
    chunks.extend(_extracurricular_chunk(e) for e in corpus.academics.extracurriculars)

    for workplace, job in corpus.work_entries():
        chunks.extend(_work_project_chunk(workplace, p) for p in job.projects)
        chunks.extend(_work_event_chunk(workplace, e) for e in job.events)

    chunks.extend(_personal_project_chunk(p) for p in corpus.projects)

    logger.debug(f"Built {len(chunks)} chunks from corpus")
    return chunks
