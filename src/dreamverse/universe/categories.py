"""Semantic categories and keyword classification of diary elements.

Each element is assigned to exactly one category so nebula membership stays
stable across re-renders. Keyword categories are tried in table order and the
first case-insensitive substring match wins; elements matching nothing fall
back to a category chosen by their element type.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from dreamverse.models import ElementType, SemanticCategory

logger = logging.getLogger(__name__)


class CategoryTableError(ValueError):
    """Raised when a replacement category table cannot be loaded."""


@dataclass(frozen=True)
class CategoryConfig:
    """Presentation and matching data for one semantic category."""

    label: str
    keywords: tuple[str, ...]
    color: str
    icon: str

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "keywords": list(self.keywords),
            "color": self.color,
            "icon": self.icon,
        }


DEFAULT_CATEGORY_TABLE: dict[SemanticCategory, CategoryConfig] = {
    SemanticCategory.FAMILY: CategoryConfig(
        label="Family",
        keywords=(
            "mother", "mommy", "father", "daddy", "grandfather", "grandmother",
            "grandpa", "grandma", "brother", "sister", "daughter", "husband",
            "wife", "parents", "family",
            "父亲", "母亲", "爸爸", "妈妈", "爷爷", "奶奶", "外公", "外婆", "哥哥",
            "姐姐", "弟弟", "妹妹", "儿子", "女儿", "丈夫", "妻子", "家人",
        ),
        color="#f472b6",
        icon="👨‍👩‍👧‍👦",
    ),
    SemanticCategory.FRIENDS: CategoryConfig(
        label="Friends",
        keywords=(
            "friend", "classmate", "colleague", "buddy", "bestie", "companion",
            "朋友", "同学", "同事", "老友", "闺蜜", "兄弟", "伙伴",
        ),
        color="#60a5fa",
        icon="🤝",
    ),
    SemanticCategory.STRANGERS: CategoryConfig(
        label="Strangers",
        keywords=(
            "stranger", "passerby", "old man", "old woman", "crowd", "child",
            "陌生人", "路人", "老人", "小孩", "男人", "女人", "人群",
        ),
        color="#a78bfa",
        icon="👥",
    ),
    SemanticCategory.FOOD: CategoryConfig(
        label="Food",
        keywords=(
            "apple", "banana", "fruit", "vegetable", "meat", "fish", "fried rice",
            "noodle", "cake", "candy", "bread", "drink", "wine", "food",
            "苹果", "香蕉", "水果", "蔬菜", "肉", "鱼", "米饭", "面条", "蛋糕", "糖果",
            "饮料", "水", "酒", "食物", "吃",
        ),
        color="#fbbf24",
        icon="🍎",
    ),
    SemanticCategory.NATURE: CategoryConfig(
        label="Nature",
        keywords=(
            "mountain", "river", "ocean", "lake", "forest", "trees", "flower",
            "grass", "skies", "cloud", "sunset", "sunrise", "sunshine", "moon",
            "rainbow", "rainstorm", "snow", "windy", "windstorm", "water",
            "山", "水", "河", "海", "湖", "森林", "树", "花", "草", "天空", "云",
            "太阳", "月亮", "星星", "雨", "雪", "风",
        ),
        color="#34d399",
        icon="🌿",
    ),
    SemanticCategory.BUILDINGS: CategoryConfig(
        label="Buildings",
        keywords=(
            "house", "home", "school", "office", "hospital", "shopping mall", "hotel",
            "restaurant", "church", "temple", "castle", "tower", "bridge",
            "房子", "家", "学校", "公司", "医院", "商场", "酒店", "餐厅", "教堂",
            "寺庙", "城堡", "塔", "桥",
        ),
        color="#94a3b8",
        icon="🏠",
    ),
    SemanticCategory.VEHICLES: CategoryConfig(
        label="Vehicles",
        keywords=(
            "automobile", "taxi", "truck", "train", "airplane", "boat",
            "bicycle", "motorcycle", "subway", "elevator",
            "车", "汽车", "火车", "飞机", "船", "自行车", "摩托车", "公交", "地铁", "电梯",
        ),
        color="#f97316",
        icon="🚗",
    ),
    SemanticCategory.EMOTIONS: CategoryConfig(
        label="Emotions",
        keywords=(
            "in love", "loving", "hatred", "fear", "afraid", "happy", "sad", "angry",
            "anxious", "anxiety", "lonely", "loneliness", "painful", "agony",
            "爱", "恨", "恐惧", "害怕", "开心", "悲伤", "愤怒", "焦虑", "孤独", "幸福", "痛苦",
        ),
        color="#ec4899",
        icon="💖",
    ),
    SemanticCategory.ACTIONS: CategoryConfig(
        label="Actions",
        keywords=(
            "flying", "running", "walking", "jump", "swim", "climb", "chasing", "escape",
            "fight", "talk", "singing", "dance", "sleep", "wake",
            "飞", "跑", "走", "跳", "游泳", "爬", "追", "逃", "打", "说话", "唱歌",
            "跳舞", "睡觉", "醒来",
        ),
        color="#22d3ee",
        icon="⚡",
    ),
    SemanticCategory.ABSTRACT: CategoryConfig(
        label="Abstract",
        keywords=(
            "time travel", "space", "dream", "memory", "future", "the past", "death",
            "life", "soul", "consciousness",
            "时间", "空间", "梦", "记忆", "未来", "过去", "死亡", "生命", "灵魂", "意识",
        ),
        color="#c084fc",
        icon="✨",
    ),
    SemanticCategory.OTHER: CategoryConfig(
        label="Other",
        keywords=(),
        color="#6b7280",
        icon="📦",
    ),
}

# Fallback when no keyword matches
TYPE_FALLBACK: dict[str, SemanticCategory] = {
    ElementType.PERSON.value: SemanticCategory.STRANGERS,
    ElementType.PLACE.value: SemanticCategory.BUILDINGS,
    ElementType.OBJECT.value: SemanticCategory.OTHER,
    ElementType.ACTION.value: SemanticCategory.ACTIONS,
}


class SemanticClassifier:
    """Maps an element's name and type to a semantic category.

    Pure and deterministic: the same (name, type) always yields the same
    category for a given table.
    """

    def __init__(self, table: dict[SemanticCategory, CategoryConfig] | None = None) -> None:
        self.table = dict(table) if table else dict(DEFAULT_CATEGORY_TABLE)
        self._matchers: list[tuple[SemanticCategory, tuple[str, ...]]] = [
            (category, tuple(kw.casefold() for kw in config.keywords if kw))
            for category, config in self.table.items()
            if category is not SemanticCategory.OTHER
        ]

    def classify(self, name: str, element_type: ElementType | str) -> SemanticCategory:
        """
        Classify an element.

        Args:
            name: Element name as extracted from the records
            element_type: person, place, object or action

        Returns:
            The first category whose keyword occurs in the name, otherwise
            the type-based fallback (OTHER for unknown types)
        """
        folded = (name or "").casefold()
        for category, keywords in self._matchers:
            if any(kw in folded for kw in keywords):
                return category

        type_value = getattr(element_type, "value", element_type)
        return TYPE_FALLBACK.get(type_value, SemanticCategory.OTHER)

    def config(self, category: SemanticCategory) -> CategoryConfig:
        """Presentation data for a category, falling back to the built-in table."""
        if category in self.table:
            return self.table[category]
        return DEFAULT_CATEGORY_TABLE[category]

    def to_dict(self) -> dict:
        return {category.value: self.config(category).to_dict() for category in SemanticCategory}

    @classmethod
    def from_dict(cls, data: dict) -> "SemanticClassifier":
        """Build a classifier from a JSON-style table.

        Entry order is preserved and defines keyword precedence.

        Raises:
            CategoryTableError: On unknown categories or malformed entries.
        """
        if not isinstance(data, dict):
            raise CategoryTableError("Category table must be a mapping")

        table: dict[SemanticCategory, CategoryConfig] = {}
        for key, entry in data.items():
            try:
                category = SemanticCategory(key)
            except ValueError as e:
                raise CategoryTableError(f"Unknown semantic category: {key!r}") from e

            if not isinstance(entry, dict):
                raise CategoryTableError(f"Entry for {key!r} must be a mapping")

            default = DEFAULT_CATEGORY_TABLE[category]
            keywords = entry.get("keywords", list(default.keywords))
            if not isinstance(keywords, list) or not all(isinstance(kw, str) for kw in keywords):
                raise CategoryTableError(f"Keywords for {key!r} must be a list of strings")

            table[category] = CategoryConfig(
                label=str(entry.get("label", default.label)),
                keywords=tuple(keywords),
                color=str(entry.get("color", default.color)),
                icon=str(entry.get("icon", default.icon)),
            )

        return cls(table)

    @classmethod
    def from_file(cls, path: str | Path) -> "SemanticClassifier":
        """Load a replacement table from a JSON file.

        Raises:
            CategoryTableError: If the file is missing, not JSON, or malformed.
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise CategoryTableError(f"Cannot read category table {path}: {e}") from e

        classifier = cls.from_dict(data)
        logger.info(f"Loaded {len(classifier.table)} semantic categories from {path}")
        return classifier


def get_classifier(table_path: str | Path | None = None) -> SemanticClassifier:
    """Classifier for the configured table, or the built-in one."""
    if table_path:
        return SemanticClassifier.from_file(table_path)
    return SemanticClassifier()


_default_classifier = SemanticClassifier()


def classify(name: str, element_type: ElementType | str) -> SemanticCategory:
    """Classify with the built-in category table."""
    return _default_classifier.classify(name, element_type)
