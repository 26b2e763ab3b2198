"""Skill catalog with synonym lookup and skill relationships."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

from jobportal.core.models import Skill
from jobportal.utils.logging import get_logger

logger = get_logger(__name__)


class RelationshipType(Enum):
    """How knowing one skill relates to another."""
    PARENT = "parent"
    RELATED = "related"
    PREREQUISITE = "prerequisite"


@dataclass(frozen=True)
class SkillRelationship:
    """Directed edge between two catalog skills."""
    parent_skill_id: str
    child_skill_id: str
    relationship_type: RelationshipType
    weight: float = 0.5


DEFAULT_SKILLS = [
    "JavaScript", "TypeScript", "React", "Next.js", "Vue.js", "Node.js", "Express.js",
    "Python", "Django", "Java", "Spring Boot", "SQL", "PostgreSQL", "MongoDB",
    "Kubernetes", "Docker", "Google Cloud", "AWS", "Machine Learning", "Deep Learning",
]

DEFAULT_SYNONYMS = {
    "JS": "JavaScript",
    "TS": "TypeScript",
    "ReactJS": "React",
    "React.js": "React",
    "Postgres": "PostgreSQL",
    "K8s": "Kubernetes",
    "Vue": "Vue.js",
    "GCP": "Google Cloud",
    "Mongo": "MongoDB",
    "ML": "Machine Learning",
    "DL": "Deep Learning",
}

DEFAULT_RELATIONSHIPS = [
    ("JavaScript", "TypeScript", RelationshipType.PARENT, 0.70),
    ("React", "Next.js", RelationshipType.PREREQUISITE, 0.60),
    ("Python", "Django", RelationshipType.PREREQUISITE, 0.50),
    ("Node.js", "Express.js", RelationshipType.PREREQUISITE, 0.60),
    ("Java", "Spring Boot", RelationshipType.PREREQUISITE, 0.55),
    ("Python", "Machine Learning", RelationshipType.RELATED, 0.40),
]


# Symbols that tell skills apart (C, C++, C#) survive as words
SLUG_SYMBOLS = (("+", " plus "), ("#", " sharp "))


def skill_slug(name: str) -> str:
    """Stable identifier derived from a skill name."""
    text = name.strip().lower()
    for symbol, word in SLUG_SYMBOLS:
        text = text.replace(symbol, word)
    return re.sub(r"[^a-z0-9]+", "-", text).strip("-")


class SkillCatalog:
    """Resolves free-text skill names to catalog skills."""

    def __init__(self, skills: Optional[Iterable[Skill]] = None):
        self.logger = logger.bind(component="skill_catalog")
        self._skills: Dict[str, Skill] = {}
        self._by_name: Dict[str, str] = {}
        self._relationships: List[SkillRelationship] = []

        for skill in skills or []:
            self.add_skill(skill)

    @classmethod
    def default(cls) -> "SkillCatalog":
        """Catalog seeded with common skills, synonyms and relationships."""
        catalog = cls(Skill(id=skill_slug(name), name=name) for name in DEFAULT_SKILLS)
        for synonym, name in DEFAULT_SYNONYMS.items():
            catalog.add_synonym(skill_slug(name), synonym)
        for parent, child, kind, weight in DEFAULT_RELATIONSHIPS:
            catalog.add_relationship(skill_slug(parent), skill_slug(child), kind, weight)
        return catalog

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, skill_id: str) -> bool:
        return skill_id in self._skills

    def add_skill(self, skill: Skill) -> Skill:
        """Register a skill. Ids and names are unique across the catalog."""
        key = skill.name.strip().lower()
        existing = self._skills.get(skill.id)
        if existing is not None and existing.name.strip().lower() != key:
            raise ValueError(f"Skill id '{skill.id}' already refers to {existing.name}")
        named = self._by_name.get(key)
        if named is not None and named != skill.id:
            raise ValueError(f"Skill name '{skill.name}' already refers to {named}")

        self._skills[skill.id] = skill
        self._by_name[key] = skill.id
        return skill

    def _free_id(self, name: str) -> str:
        base = skill_slug(name) or "skill"
        skill_id, n = base, 2
        while skill_id in self._skills:
            skill_id = f"{base}-{n}"
            n += 1
        return skill_id

    def add_synonym(self, skill_id: str, synonym: str) -> None:
        """Register an alternative name. Synonyms are unique across the catalog."""
        if skill_id not in self._skills:
            raise KeyError(f"Unknown skill: {skill_id}")
        key = synonym.strip().lower()
        existing = self._by_name.get(key)
        if existing is not None and existing != skill_id:
            raise ValueError(f"Synonym '{synonym}' already refers to {existing}")
        self._by_name[key] = skill_id

    def add_relationship(
        self,
        parent_skill_id: str,
        child_skill_id: str,
        relationship_type: RelationshipType,
        weight: float = 0.5,
    ) -> SkillRelationship:
        if not 0 <= weight <= 1:
            raise ValueError("Relationship weight must be between 0 and 1")
        for skill_id in (parent_skill_id, child_skill_id):
            if skill_id not in self._skills:
                raise KeyError(f"Unknown skill: {skill_id}")

        relationship = SkillRelationship(parent_skill_id, child_skill_id, relationship_type, weight)
        self._relationships = [
            r for r in self._relationships
            if (r.parent_skill_id, r.child_skill_id) != (parent_skill_id, child_skill_id)
        ]
        self._relationships.append(relationship)
        return relationship

    def get(self, skill_id: str) -> Optional[Skill]:
        return self._skills.get(skill_id)

    def resolve(self, name: str) -> Optional[Skill]:
        """Find a skill by name or synonym, case-insensitively."""
        skill_id = self._by_name.get(name.strip().lower())
        return self._skills.get(skill_id) if skill_id else None

    def resolve_or_create(self, name: str, category: Optional[str] = None) -> Skill:
        """Resolve a name, adding it to the catalog when unknown."""
        skill = self.resolve(name)
        if skill is None:
            skill = self.add_skill(Skill(id=self._free_id(name), name=name.strip(), category=category))
            self.logger.debug("Added unknown skill to catalog", skill=skill.name)
        return skill

    def related(self, skill_id: str) -> List[SkillRelationship]:
        """Skills that build on ``skill_id``, strongest first."""
        edges = [r for r in self._relationships if r.parent_skill_id == skill_id]
        return sorted(edges, key=lambda r: r.weight, reverse=True)

    def transferable_hints(
        self,
        missing_skill_ids: Iterable[str],
        candidate_skill_ids: Iterable[str],
    ) -> List[str]:
        """
        Upskilling hints for missing skills the candidate already has a head start on.

        Hints are informational only; they never feed into a match score.
        """
        have = set(candidate_skill_ids)
        hints = []
        for missing_id in missing_skill_ids:
            sources = sorted(
                (r for r in self._relationships if r.child_skill_id == missing_id and r.parent_skill_id in have),
                key=lambda r: r.weight,
                reverse=True,
            )
            if not sources:
                continue
            source = self._skills[sources[0].parent_skill_id]
            target = self._skills[missing_id]
            hints.append(f"Your {source.name} experience gives you a head start on {target.name}.")
        return hints

    def skill_for(self, name: str, skill_id: Optional[str] = None, category: Optional[str] = None) -> Skill:
        """Skill reference for external input; an explicit id is used as given."""
        if skill_id:
            return self._skills.get(skill_id) or Skill(id=skill_id, name=name.strip(), category=category)
        return self.resolve_or_create(name, category=category)
