"""Selectable aesthetics, shot types and wardrobes."""

from pydantic import BaseModel, ConfigDict

from .models import PromptSpecification


class CatalogEntry(BaseModel):
    """A selectable option and the keywords it contributes."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    keywords: tuple[str, ...]


class Aesthetic(CatalogEntry):
    midjourney_params: str
    is_premium: bool = False
    sub_options: tuple["Aesthetic", ...] = ()


class SmartDefaults(BaseModel):
    """Pre-filled choices offered once an aesthetic is picked."""

    model_config = ConfigDict(frozen=True)

    lighting: tuple[str, ...]
    mood: tuple[str, ...]
    camera_angle: tuple[str, ...]
    quality: tuple[str, ...]
    materials: tuple[str, ...]
    accessories: tuple[str, ...]


_OLD_MONEY_PARAMS = "--stylize 250 --v 6.0 --style raw"

AESTHETICS: tuple[Aesthetic, ...] = (
    Aesthetic(
        id="old-money",
        name="Old Money",
        description="Warm, grainy, timeless luxury",
        keywords=(
            "shot on 35mm film",
            "grainy texture",
            "soft warm lighting",
            "linen",
            "silk",
            "timeless elegance",
        ),
        midjourney_params=_OLD_MONEY_PARAMS,
        sub_options=(
            Aesthetic(
                id="hamptons",
                name="Hamptons",
                description="East Coast summer elegance",
                keywords=("beach house", "white linen", "ocean breeze"),
                midjourney_params=_OLD_MONEY_PARAMS,
            ),
            Aesthetic(
                id="paris",
                name="Paris",
                description="European sophistication",
                keywords=("cobblestone", "café", "classic architecture"),
                midjourney_params=_OLD_MONEY_PARAMS,
            ),
            Aesthetic(
                id="ralph-lauren",
                name="Ralph Lauren Vibe",
                description="Preppy American luxury",
                keywords=("polo", "equestrian", "country club"),
                midjourney_params=_OLD_MONEY_PARAMS,
            ),
        ),
    ),
    Aesthetic(
        id="clean-girl",
        name="Clean Girl",
        description="Bright, sharp, minimalist",
        keywords=(
            "bright natural lighting",
            "sharp focus",
            "minimalist",
            "neutral tones",
            "crisp",
        ),
        midjourney_params="--stylize 200 --v 6.0",
    ),
    Aesthetic(
        id="dark-feminine",
        name="Dark Feminine",
        description="Moody, flash, mysterious",
        keywords=(
            "moody lighting",
            "flash photography",
            "high contrast",
            "dramatic shadows",
            "rich blacks",
        ),
        midjourney_params="--stylize 300 --v 6.0",
    ),
    Aesthetic(
        id="y2k",
        name="Y2K",
        description="Vibrant, film, nostalgic",
        keywords=(
            "vibrant colors",
            "film grain",
            "nostalgic",
            "early 2000s",
            "playful",
        ),
        midjourney_params="--stylize 150 --v 6.0",
    ),
)

SHOT_TYPES: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="pov",
        name="POV",
        description="First person perspective",
        keywords=("first person", "POV", "immersive", "from above"),
    ),
    CatalogEntry(
        id="candid",
        name="Candid",
        description="Walking away, natural",
        keywords=("walking away", "back of head", "candid moment", "in motion"),
    ),
    CatalogEntry(
        id="detail",
        name="Detail",
        description="Hands, accessories focus",
        keywords=("close-up", "hands", "accessories", "detail shot", "texture"),
    ),
    CatalogEntry(
        id="wide",
        name="Wide",
        description="Atmosphere, environment",
        keywords=("wide shot", "environment", "atmosphere", "establishing shot"),
    ),
)

WARDROBES: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        id="athleisure",
        name="Athleisure",
        description="Active luxury",
        keywords=("athletic wear", "luxury sportswear", "yoga", "pilates"),
    ),
    CatalogEntry(
        id="business-chic",
        name="Business Chic",
        description="Professional elegance",
        keywords=("blazer", "tailored", "power suit", "office wear"),
    ),
    CatalogEntry(
        id="evening-gown",
        name="Evening Gown",
        description="Formal elegance",
        keywords=("evening dress", "gown", "formal", "red carpet"),
    ),
    CatalogEntry(
        id="streetwear",
        name="Streetwear",
        description="Urban luxury",
        keywords=("street style", "urban", "designer", "sneakers"),
    ),
)

_FALLBACK_DEFAULTS = SmartDefaults(
    lighting=("soft natural", "golden hour", "studio"),
    mood=("serene", "luxurious", "confident"),
    camera_angle=("eye level", "slightly elevated"),
    quality=("photorealistic", "cinematic"),
    materials=("silk", "linen", "cashmere"),
    accessories=("gold jewelry", "designer bag"),
)

AESTHETIC_DEFAULTS: dict[str, SmartDefaults] = {
    "old-money": SmartDefaults(
        lighting=("golden hour", "soft natural", "warm ambient"),
        mood=("serene", "luxurious", "timeless"),
        camera_angle=("eye level", "slightly elevated"),
        quality=("photorealistic", "cinematic", "35mm film"),
        materials=("linen", "silk", "cashmere", "cotton"),
        accessories=("gold jewelry", "designer bag", "sunglasses", "watch"),
    ),
    "clean-girl": SmartDefaults(
        lighting=("bright natural", "soft natural", "studio"),
        mood=("fresh", "minimalist", "serene"),
        camera_angle=("eye level", "slightly elevated"),
        quality=("photorealistic", "editorial", "digital"),
        materials=("cotton", "linen", "silk"),
        accessories=("minimal jewelry", "designer bag", "sunglasses"),
    ),
    "dark-feminine": SmartDefaults(
        lighting=("dramatic", "moody", "low key"),
        mood=("mysterious", "powerful", "sensual"),
        camera_angle=("low angle", "dutch angle", "eye level"),
        quality=("cinematic", "editorial", "film grain"),
        materials=("silk", "leather", "velvet"),
        accessories=("statement jewelry", "designer bag", "heels"),
    ),
    "y2k": SmartDefaults(
        lighting=("bright", "colorful", "flash"),
        mood=("playful", "energetic", "nostalgic"),
        camera_angle=("eye level", "close-up"),
        quality=("film grain", "vintage", "35mm"),
        materials=("denim", "synthetic", "metallic"),
        accessories=("chunky jewelry", "mini bag", "platform shoes"),
    ),
}

FIELD_SUGGESTIONS: dict[str, tuple[str, ...]] = {
    "lighting": ("golden hour", "soft natural", "dramatic", "studio"),
    "mood": ("serene", "luxurious", "energetic", "mysterious"),
    "scene": (
        "luxury hotel lobby",
        "beach club",
        "coffee shop",
        "rooftop terrace",
        "art gallery",
    ),
    "materials": ("silk", "linen", "cashmere", "cotton", "leather"),
    "accessories": (
        "gold jewelry",
        "designer bag",
        "sunglasses",
        "watch",
        "minimal jewelry",
    ),
}

TRENDING_COMBINATIONS: tuple[PromptSpecification, ...] = (
    PromptSpecification(
        scene="luxury hotel lobby",
        lighting="golden hour",
        mood="serene",
        materials=["silk", "linen"],
    ),
    PromptSpecification(
        scene="beach club",
        lighting="bright natural",
        mood="energetic",
        materials=["linen", "cotton"],
    ),
    PromptSpecification(
        scene="coffee shop",
        lighting="soft natural",
        mood="cozy",
        materials=["cashmere", "wool"],
    ),
)


def _find(entries: tuple[CatalogEntry, ...], entry_id: str) -> CatalogEntry | None:
    return next((entry for entry in entries if entry.id == entry_id), None)


def get_aesthetic(aesthetic_id: str) -> Aesthetic | None:
    """Find an aesthetic or one of its sub-options by id."""
    for aesthetic in AESTHETICS:
        if aesthetic.id == aesthetic_id:
            return aesthetic
        found = _find(aesthetic.sub_options, aesthetic_id)
        if found is not None:
            return found
    return None


def get_shot_type(shot_type_id: str) -> CatalogEntry | None:
    return _find(SHOT_TYPES, shot_type_id)


def get_wardrobe(wardrobe_id: str) -> CatalogEntry | None:
    return _find(WARDROBES, wardrobe_id)


def defaults_for_aesthetic(aesthetic_id: str | None) -> SmartDefaults:
    """Smart defaults for an aesthetic, or generic ones."""
    if aesthetic_id is None:
        return _FALLBACK_DEFAULTS
    return AESTHETIC_DEFAULTS.get(aesthetic_id, _FALLBACK_DEFAULTS)


def suggestions_for_field(field: str) -> tuple[str, ...]:
    return FIELD_SUGGESTIONS.get(field, ())


def trending_combinations() -> list[PromptSpecification]:
    """Partial specifications to offer as one-click starting points."""
    return [combo.model_copy(deep=True) for combo in TRENDING_COMBINATIONS]


def apply_catalog_keywords(
    spec: PromptSpecification,
    *,
    aesthetic: Aesthetic | None = None,
    shot_type: CatalogEntry | None = None,
    wardrobe: CatalogEntry | None = None,
) -> PromptSpecification:
    """Return a copy of ``spec`` with the chosen catalog entries merged in.

    The aesthetic sets ``style`` when none is chosen yet, shot type keywords
    extend ``pose`` and wardrobe keywords fill ``clothing`` when it is empty.
    """
    update: dict[str, object] = {}
    if aesthetic is not None and not spec.style:
        update["style"] = aesthetic.id
    if shot_type is not None:
        pose = list(spec.pose)
        pose.extend(k for k in shot_type.keywords if k not in pose)
        update["pose"] = pose
    if wardrobe is not None and not spec.clothing:
        update["clothing"] = ", ".join(wardrobe.keywords)
    return spec.model_copy(update=update)
