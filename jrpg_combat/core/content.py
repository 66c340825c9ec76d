import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from catchery import log_warning

from jrpg_combat.character.combatant import (
    Character,
    Enemy,
    ItemDefinition,
    SkillDefinition,
    TurnResources,
)
from jrpg_combat.character.leveling import calculate_xp_to_next
from jrpg_combat.character.templates import (
    ClassTemplate,
    EnemyTemplate,
    ItemTemplate,
    SkillTemplate,
)
from jrpg_combat.core.errors import ContentError
from jrpg_combat.core.logging import log_debug

# Default location of the bundled content files.
DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class ContentRepository:
    """
    Registry of the static game content, keyed by id.

    The combat core only reads from these maps; combatants are built from the
    templates through ``create_character`` and ``create_enemy``.
    """

    classes: dict[str, ClassTemplate]
    skills: dict[str, SkillTemplate]
    items: dict[str, ItemTemplate]
    enemies: dict[str, EnemyTemplate]

    def __init__(
        self,
        classes: Mapping[str, ClassTemplate] | None = None,
        skills: Mapping[str, SkillTemplate] | None = None,
        items: Mapping[str, ItemTemplate] | None = None,
        enemies: Mapping[str, EnemyTemplate] | None = None,
    ) -> None:
        """
        Initialize the ContentRepository.

        Args:
            classes (Mapping[str, ClassTemplate] | None):
                Party classes by id.
            skills (Mapping[str, SkillTemplate] | None):
                Skills by id.
            items (Mapping[str, ItemTemplate] | None):
                Items by id.
            enemies (Mapping[str, EnemyTemplate] | None):
                Enemies by id.

        """
        self.classes = dict(classes or {})
        self.skills = dict(skills or {})
        self.items = dict(items or {})
        self.enemies = dict(enemies or {})

    @classmethod
    def from_directory(cls, root: Path | str = DATA_DIR) -> "ContentRepository":
        """
        Load every content file from a directory.

        Args:
            root (Path | str):
                Directory holding ``classes.json``, ``skills.json``,
                ``items.json`` and ``enemies.json``.

        Returns:
            ContentRepository: The loaded repository.

        Raises:
            ContentError: If a file is missing or malformed.

        """
        root = Path(root)
        return cls(
            classes=_load_json_file(
                root / "classes.json", _index(ClassTemplate), "classes"
            ),
            skills=_load_json_file(root / "skills.json", _index(SkillTemplate), "skills"),
            items=_load_json_file(root / "items.json", _index(ItemTemplate), "items"),
            enemies=_load_json_file(
                root / "enemies.json", _index(EnemyTemplate), "enemies"
            ),
        )

    def _get_from_collection(self, collection_name: str, entry_id: str) -> Any | None:
        """
        Generic helper to get an entry from any collection.

        Args:
            collection_name (str):
                Name of the collection attribute (e.g., 'skills', 'enemies').
            entry_id (str):
                Id of the entry to retrieve.

        Returns:
            Any | None:
                The entry if found, None otherwise.

        """
        entry = getattr(self, collection_name).get(entry_id)
        if entry is None:
            log_warning(
                f"Entry '{entry_id}' not found in collection '{collection_name}'.",
                {"collection_name": collection_name, "entry_id": entry_id},
            )
        return entry

    def get_class(self, class_id: str) -> ClassTemplate | None:
        """Get a class template by id, or None if not found."""
        return self._get_from_collection("classes", class_id)

    def get_skill(self, skill_id: str) -> SkillTemplate | None:
        """Get a skill template by id, or None if not found."""
        return self._get_from_collection("skills", skill_id)

    def get_item(self, item_id: str) -> ItemTemplate | None:
        """Get an item template by id, or None if not found."""
        return self._get_from_collection("items", item_id)

    def get_enemy(self, enemy_id: str) -> EnemyTemplate | None:
        """Get an enemy template by id, or None if not found."""
        return self._get_from_collection("enemies", enemy_id)

    def _skill_definitions(self, skill_ids: list[str]) -> list[SkillDefinition]:
        definitions = []
        for skill_id in skill_ids:
            template = self.get_skill(skill_id)
            if template is not None:
                definitions.append(template.to_definition())
        return definitions

    def create_character(
        self,
        class_id: str,
        character_id: str,
        name: str,
        inventory: Mapping[str, int] | None = None,
    ) -> Character:
        """
        Build a level 1 party member from a class template.

        Args:
            class_id (str):
                Id of the class template.
            character_id (str):
                Id of the new character within the encounter.
            name (str):
                Display name.
            inventory (Mapping[str, int] | None):
                Item ids and quantities carried into combat.

        Returns:
            Character: The new character at full HP and MP.

        Raises:
            ContentError: If the class is unknown.

        """
        template = self.get_class(class_id)
        if template is None:
            raise ContentError(f"Unknown class: {class_id}")

        items: list[ItemDefinition] = []
        for item_id, quantity in (inventory or {}).items():
            item = self.get_item(item_id)
            if item is not None and quantity > 0:
                items.append(item.to_definition(quantity))

        return Character(
            id=character_id,
            name=name,
            character_class=template.id,
            hp=template.base_hp,
            max_hp=template.base_hp,
            mp=template.base_mp,
            max_mp=template.base_mp,
            attack=template.base_attack,
            armor=template.base_armor,
            speed=template.base_speed,
            resources=TurnResources(
                action_points=template.action_points,
                max_action_points=template.action_points,
                initiative=template.base_speed,
            ),
            skill_ids=list(template.starting_skills),
            skills=self._skill_definitions(template.starting_skills),
            items=items,
            xp_to_next=calculate_xp_to_next(1),
        )

    def create_enemy(self, enemy_id: str, instance_id: str | None = None) -> Enemy:
        """
        Build an enemy from its template.

        Args:
            enemy_id (str):
                Id of the enemy template.
            instance_id (str | None):
                Id of the new combatant, the template id when omitted.

        Returns:
            Enemy: The new enemy at full HP and MP.

        Raises:
            ContentError: If the enemy is unknown.

        """
        template = self.get_enemy(enemy_id)
        if template is None:
            raise ContentError(f"Unknown enemy: {enemy_id}")
        return Enemy(
            id=instance_id or template.id,
            name=template.name,
            hp=template.hp,
            max_hp=template.hp,
            mp=template.mp,
            max_mp=template.mp,
            attack=template.attack,
            armor=template.armor,
            speed=template.speed,
            ai_role=template.ai_role,
            resources=TurnResources(
                action_points=template.action_points,
                max_action_points=template.action_points,
                initiative=template.speed,
            ),
            skill_ids=list(template.skill_ids),
            skills=self._skill_definitions(template.skill_ids),
            xp_reward=template.xp_reward,
            gold_reward=template.gold_reward,
        )


def _index(model: type) -> Callable[[list[dict]], dict[str, Any]]:
    """Returns a loader validating each entry with ``model`` and keying it by id."""

    def _load(data: list[dict]) -> dict[str, Any]:
        entries: dict[str, Any] = {}
        for entry_data in data:
            entry = model(**entry_data)
            if entry.id in entries:
                raise ValueError(f"Duplicate {model.__name__} id: {entry.id}")
            entries[entry.id] = entry
        return entries

    _load.__name__ = f"load_{model.__name__}"
    return _load


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        log_debug(f"Loading {description} using {loader_func.__name__}...")
        # Validate file path
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        if not filepath.is_file():
            raise ValueError(f"Not a file: {filepath}")
        # Load and validate JSON
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        if not data:
            log_warning(f"No {description} found in {filepath}", {"file": str(filepath)})
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ContentError(f"File {filepath} raised an error: {e}") from e
