"""Pydantic models for pipeline configuration."""

import hashlib
import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from gene_similarity.similarity.models import ALL_GENES_KEY, AspectType


class AspectConfig(BaseModel):
    """One annotation aspect and the similarity policy applied to it."""

    name: str = Field(
        ...,
        min_length=1,
        description="Aspect name as stored in gene_items.aspect (e.g. 'pathways')",
    )
    tag: str = Field(
        ...,
        min_length=1,
        description="Aspect identifier attached to every stored matrix",
    )
    statistical_type: AspectType = Field(
        ...,
        description="Similarity policy: category, count or presence",
    )
    description: str = Field(
        default="",
        description="Free-text description of the aspect",
    )

    @field_validator("tag")
    @classmethod
    def tag_not_reserved(cls, v: str) -> str:
        """Reject tags that collide with the gene index row key."""
        if v == ALL_GENES_KEY:
            raise ValueError(f"Aspect tag may not be '{ALL_GENES_KEY}'")
        return v


class OutputConfig(BaseModel):
    """Configuration for exported similarity tables."""

    output_dir: Path = Field(
        default=Path("results"),
        description="Directory for TSV/Parquet exports",
    )
    min_rating: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Minimum rating included in exports and queries",
    )


class PipelineConfig(BaseModel):
    """Main pipeline configuration."""

    data_dir: Path = Field(
        ...,
        description="Directory for input association files",
    )
    duckdb_path: Path = Field(
        ...,
        description="Path to DuckDB database file",
    )
    aspects: list[AspectConfig] = Field(
        ...,
        min_length=1,
        description="Aspects to compute similarity for",
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig,
        description="Export configuration",
    )

    @field_validator("data_dir")
    @classmethod
    def create_directory(cls, v: Path) -> Path:
        """Create directory if it doesn't exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("aspects")
    @classmethod
    def unique_tags(cls, v: list[AspectConfig]) -> list[AspectConfig]:
        """Aspect tags must be unique: they key every stored matrix."""
        tags = [aspect.tag for aspect in v]
        duplicates = sorted({tag for tag in tags if tags.count(tag) > 1})
        if duplicates:
            raise ValueError(f"Duplicate aspect tags: {', '.join(duplicates)}")
        return v

    def get_aspect(self, tag: str) -> AspectConfig:
        """
        Look up an aspect by tag.

        Raises:
            KeyError: If no aspect has this tag
        """
        for aspect in self.aspects:
            if aspect.tag == tag:
                return aspect
        raise KeyError(f"Unknown aspect tag: {tag}")

    def config_hash(self) -> str:
        """
        Compute SHA-256 hash of the configuration.

        Returns a deterministic hash based on all config values,
        useful for tracking config changes and cache invalidation.
        """
        config_dict = self.model_dump(mode="python")
        config_json = json.dumps(
            config_dict,
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(config_json.encode()).hexdigest()
