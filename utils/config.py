from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(slots=True)
class ProfileConfig:
    """Vocabulary and metadata field names used by one project step."""

    name: str
    vocabulary: str
    class_field: str
    terms_field: str
    metadata_title: str
    metadata_class: str


@dataclass(slots=True)
class AppConfig:
    vocabulary_file: Path
    log_dir: Path
    log_level: str
    max_workers: int
    stats_file: Path
    db_path: Path
    profiles: Dict[str, ProfileConfig]
    default_profile: ProfileConfig
    profiles_file: Path

    def get_profile(self, profile_name: Optional[str]) -> ProfileConfig:
        if not profile_name:
            return self.default_profile
        if profile_name not in self.profiles:
            available = ", ".join(sorted(self.profiles))
            raise KeyError(f"Unknown profile '{profile_name}'. Available profiles: {available}")
        return self.profiles[profile_name]


def _resolve_path(value: str | None, fallback: str) -> Path:
    candidate = Path(value or fallback)
    if not candidate.is_absolute():
        candidate = PROJECT_ROOT / candidate
    return candidate


def load_config(env_file: str | os.PathLike[str] | None = None) -> AppConfig:
    """Load configuration values from a .env file and environment variables."""

    if env_file:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    vocabulary_file = _resolve_path(os.getenv("VOCABULARY_FILE"), "vocabularies.json")
    log_dir = _resolve_path(os.getenv("LOG_DIR"), "logs")
    stats_file = _resolve_path(os.getenv("STATS_FILE"), "data/stats.json")
    db_path = _resolve_path(os.getenv("DB_PATH"), "data/class_assignment.db")
    profiles_file = _resolve_path(os.getenv("PROFILES_FILE"), "profiles.json")

    log_dir.mkdir(parents=True, exist_ok=True)
    stats_file.parent.mkdir(parents=True, exist_ok=True)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    max_workers = int(os.getenv("MAX_WORKERS", "1"))
    if max_workers < 1:
        raise ValueError(f"MAX_WORKERS must be at least 1, got {max_workers}")

    default_profile = ProfileConfig(
        name="default",
        vocabulary=os.getenv("VOCABULARY", "classes"),
        class_field=os.getenv("CLASS_FIELD", "class"),
        terms_field=os.getenv("TERMS_FIELD", "terms"),
        metadata_title=os.getenv("METADATA_TITLE", "TitleDocMain"),
        metadata_class=os.getenv("METADATA_CLASS", "Classification"),
    )
    profiles: Dict[str, ProfileConfig] = {default_profile.name: default_profile}

    if profiles_file.exists():
        data = json.loads(profiles_file.read_text(encoding="utf-8"))
        for item in data.get("profiles", []):
            name = item.get("name")
            if not name:
                continue
            profiles[name] = ProfileConfig(
                name=name,
                vocabulary=item.get("vocabulary", default_profile.vocabulary),
                class_field=item.get("class", default_profile.class_field),
                terms_field=item.get("terms", default_profile.terms_field),
                metadata_title=item.get("metadataTitle", default_profile.metadata_title),
                metadata_class=item.get("metadataClass", default_profile.metadata_class),
            )

    return AppConfig(
        vocabulary_file=vocabulary_file,
        log_dir=log_dir,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        max_workers=max_workers,
        stats_file=stats_file,
        db_path=db_path,
        profiles=profiles,
        default_profile=default_profile,
        profiles_file=profiles_file,
    )
