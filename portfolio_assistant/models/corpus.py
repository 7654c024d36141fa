"""
Corpus Records

Typed view of the personal data corpus (``data/context.json``). Every field
is optional: an absent key and an explicit ``null`` both fall back to the
field default, so the chunk builder never has to guard a lookup.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from portfolio_assistant.config import settings

logger = logging.getLogger(__name__)

Scalar = Union[str, int, float]


class CorpusRecord(BaseModel):
    """
    Base record: ignores unknown keys and treats null as absent.

    Numbers in text fields (a phone number, a course number) are read as text.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Profile(CorpusRecord):
    name: Optional[str] = None
    role: Optional[str] = None
    bio: Optional[str] = None


class Contact(CorpusRecord):
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None


class Course(CorpusRecord):
    identifier: Optional[str] = None
    title: Optional[str] = None
    year: Optional[Scalar] = None
    description: Optional[str] = None
    accomplishments: List[str] = Field(default_factory=list)
    technology: List[str] = Field(default_factory=list)


class Extracurricular(CorpusRecord):
    title: Optional[str] = None
    org: Optional[str] = None
    description: Optional[str] = None
    technology: List[str] = Field(default_factory=list)


class WorkProject(CorpusRecord):
    name: Optional[str] = None
    team_size: Optional[Scalar] = None
    description: Optional[str] = None
    technology: List[str] = Field(default_factory=list)


class WorkEvent(CorpusRecord):
    name: Optional[str] = None
    description: Optional[str] = None


class Job(CorpusRecord):
    """One workplace entry; only its projects and events are retrievable."""

    projects: List[WorkProject] = Field(default_factory=list)
    events: List[WorkEvent] = Field(default_factory=list)


class PersonalProject(CorpusRecord):
    title: Optional[str] = None
    description: Optional[str] = None
    technology: List[str] = Field(default_factory=list)
    link: Optional[str] = None
    category: List[str] = Field(default_factory=list)


class Academics(CorpusRecord):
    courses: List[Course] = Field(default_factory=list)
    extracurriculars: List[Extracurricular] = Field(default_factory=list)


class Corpus(CorpusRecord):
    """The whole corpus. ``work`` keeps the key order of the source document."""

    profile: Optional[Profile] = None
    contact: Optional[Contact] = None
    academics: Academics = Field(default_factory=Academics)
    work: Dict[str, Job] = Field(default_factory=dict)
    projects: List[PersonalProject] = Field(default_factory=list)
    system_instructions: Optional[str] = None

    def work_entries(self) -> List[Tuple[str, Job]]:
        """Workplaces as ``(key, job)`` pairs in definition order."""
        return list(self.work.items())


def load_corpus(path: Union[str, Path]) -> Corpus:
    """
    Load and validate a corpus JSON file.

    Args:
        path: Path to the JSON document.

    Returns:
        Parsed Corpus.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If the document does not match the schema.
    """
    corpus_path = Path(path)
    with corpus_path.open(encoding="utf-8") as f:
        data = json.load(f)

    corpus = Corpus.model_validate(data)
    logger.info(f"Loaded corpus from {corpus_path} ({len(corpus.work)} workplaces)")
    return corpus


@lru_cache
def get_corpus() -> Corpus:
    """Get the configured corpus (loaded once)."""
    return load_corpus(settings.corpus_path)
