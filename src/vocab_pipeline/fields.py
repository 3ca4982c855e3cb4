"""Catalog of output fields a mapping rule may target."""

from __future__ import annotations

from dataclasses import dataclass

KIND_TEXT = "text"
KIND_LIST = "list"
KIND_NUMBER = "number"
KIND_VIDEO = "video"


@dataclass(frozen=True)
class FieldSpec:
    """One target field with its display label and output kind."""

    id: str
    label: str
    kind: str = KIND_TEXT


FIELD_CATALOG: tuple[FieldSpec, ...] = (
    FieldSpec("text", "Word spelling"),
    FieldSpec("translation", "Translation"),
    FieldSpec("phoneticUs", "US phonetic"),
    FieldSpec("phoneticUk", "UK phonetic"),
    FieldSpec("partOfSpeech", "Part of speech"),
    FieldSpec("englishDefinition", "English definition"),
    FieldSpec("inflections", "Inflections", KIND_LIST),
    FieldSpec("dictionaryExample", "Dictionary example"),
    FieldSpec("dictionaryExampleTranslation", "Dictionary example translation"),
    FieldSpec("contextSentence", "Context sentence"),
    FieldSpec("contextSentenceTranslation", "Context sentence translation"),
    FieldSpec("mixedSentence", "Mixed-language sentence"),
    FieldSpec("phrases", "Phrases", KIND_LIST),
    FieldSpec("roots", "Roots", KIND_LIST),
    FieldSpec("synonyms", "Synonyms", KIND_LIST),
    FieldSpec("tags", "Tags", KIND_LIST),
    FieldSpec("importance", "Importance", KIND_NUMBER),
    FieldSpec("cocaRank", "COCA rank", KIND_NUMBER),
    FieldSpec("image", "Image"),
    FieldSpec("sourceUrl", "Source URL"),
    FieldSpec("videoUrl", "Video URL", KIND_VIDEO),
    FieldSpec("videoTitle", "Video title", KIND_VIDEO),
    FieldSpec("videoCover", "Video cover", KIND_VIDEO),
)

FIELDS_BY_ID: dict[str, FieldSpec] = {spec.id: spec for spec in FIELD_CATALOG}
FIELD_IDS: tuple[str, ...] = tuple(spec.id for spec in FIELD_CATALOG)
LIST_FIELDS: frozenset[str] = frozenset(s.id for s in FIELD_CATALOG if s.kind == KIND_LIST)
NUMBER_FIELDS: frozenset[str] = frozenset(s.id for s in FIELD_CATALOG if s.kind == KIND_NUMBER)
VIDEO_FIELDS: frozenset[str] = frozenset(s.id for s in FIELD_CATALOG if s.kind == KIND_VIDEO)

# Record keys after finalization: the three video fields collapse into ``video``.
RECORD_KEYS: tuple[str, ...] = tuple(f for f in FIELD_IDS if f not in VIDEO_FIELDS) + ("video",)


def is_known_field(field_id: str) -> bool:
    return field_id in FIELDS_BY_ID


def get_field(field_id: str) -> FieldSpec:
    """Return the catalog entry for ``field_id``.

    Raises:
        KeyError: If the field is not part of the catalog.
    """

    try:
        return FIELDS_BY_ID[field_id]
    except KeyError:
        raise KeyError(f"Unknown field: {field_id}") from None
