"""Phrase catalog loading for CSV, JSON and YAML sources."""
import csv
import hashlib
import json
import logging
from pathlib import Path

from everest_speak.models import Phrase

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"

# Spreadsheet headers and snake-case names both map onto Phrase fields
COLUMN_MAP = {
    "category": "category",
    "situation": "situation",
    "korean": "source_text",
    "source_text": "source_text",
    "sentence": "source_text",
    "pronunciation": "phonetic",
    "phonetic": "phonetic",
    "nepali": "gloss",
    "gloss": "gloss",
    "meaning": "gloss",
}


def mint_phrase_id(category: str, situation: str, source_text: str) -> str:
    digest = hashlib.sha1(f"{category}|{situation}|{source_text}".encode("utf-8")).hexdigest()
    return digest[:12]


def _map_row(row: dict) -> dict:
    mapped = {}
    for key, value in row.items():
        if key is None:
            continue
        field_name = COLUMN_MAP.get(key.strip().lower())
        if field_name and field_name not in mapped:
            mapped[field_name] = (value or "").strip() if isinstance(value, str) else str(value or "")
    return mapped


def build_catalog(rows: list[dict]) -> list[Phrase]:
    """Turn raw rows into Phrases, keeping source order and minting unique ids."""
    catalog = []
    seen: dict[str, int] = {}
    for index, row in enumerate(rows, 1):
        if not isinstance(row, dict):
            logger.warning("Skipping catalog row %s: expected a mapping, got %s", index, type(row).__name__)
            continue
        fields = _map_row(row)
        if not fields.get("source_text"):
            logger.warning("Skipping catalog row %s: empty Korean sentence", index)
            continue
        category = fields.get("category", "")
        situation = fields.get("situation", "")
        base_id = mint_phrase_id(category, situation, fields["source_text"])
        count = seen.get(base_id, 0)
        seen[base_id] = count + 1
        phrase_id = base_id if count == 0 else f"{base_id}-{count}"
        catalog.append(Phrase(
            category=category,
            situation=situation,
            source_text=fields["source_text"],
            phonetic=fields.get("phonetic", ""),
            gloss=fields.get("gloss", ""),
            phrase_id=phrase_id,
        ))
    return catalog


def read_rows(file_path: str) -> list[dict]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".csv":
        with path.open(encoding="utf-8-sig", newline="") as handle:
            try:
                rows = list(csv.DictReader(handle))
            except csv.Error as exc:
                raise ValueError(f"{path} is not valid CSV: {exc}") from exc
        # drop rows where every cell is blank
        return [row for row in rows if any(isinstance(v, str) and v.strip() for v in row.values())]
    elif suffix == ".json":
        data = json.loads(path.read_text(encoding="utf-8"))
    elif suffix in (".yaml", ".yml"):
        import yaml
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"{path} is not valid YAML: {exc}") from exc
    else:
        raise ValueError(f"Unsupported catalog format: {suffix or path.name}")

    if isinstance(data, dict):
        data = data.get("phrases", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a list of phrases")
    return data


def load_catalog(file_path: str) -> list[Phrase]:
    catalog = build_catalog(read_rows(file_path))
    logger.info("Loaded %s phrases from %s", len(catalog), file_path)
    return catalog


def load_default_catalog() -> list[Phrase]:
    return load_catalog(str(CONTENT_DIR / "phrases.json"))


def load_catalog_or_default(file_path: str | None) -> list[Phrase]:
    """Load a catalog file, falling back to the bundled phrases when it can't be read."""
    if file_path:
        try:
            catalog = load_catalog(file_path)
        except (OSError, ValueError) as exc:
            logger.warning("Catalog %s unavailable (%s), using bundled phrases", file_path, exc)
        else:
            if catalog:
                return catalog
            logger.warning("Catalog %s has no usable phrases, using bundled phrases", file_path)
    return load_default_catalog()


def categories(catalog: list[Phrase]) -> list[str]:
    cats = []
    for phrase in catalog:
        if phrase.category and phrase.category not in cats:
            cats.append(phrase.category)
    return ["All"] + cats


def filter_by_category(catalog: list[Phrase], category: str) -> list[Phrase]:
    if category == "All":
        return list(catalog)
    return [p for p in catalog if p.category == category]
