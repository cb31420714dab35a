"""
Legacy import - moves file-per-post JSON records into the posts table.

The legacy store kept one pretty-printed JSON file per post, named by its
string id (post_<timestamp>_<random>.json). Records written by different
versions of the editor use either camelCase or snake_case keys.

Posts whose slug already exists are skipped, so the import can be re-run.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from utils.slug import slugify
from .exceptions import LegacyDirectoryError
from .models import PostStatus
from .repository import PostRepository

logger = logging.getLogger(__name__)


@dataclass
class MigrationReport:
    """Outcome of one import run."""
    migrated: int = 0
    skipped: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    total: int = 0

    @property
    def error_count(self) -> int:
        return len(self.errors)


def _pick(record: dict, *keys: str, default: Any = None) -> Any:
    """First non-empty value among the given keys."""
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return default


def normalize_legacy_post(record: Any) -> dict[str, Any]:
    """
    Turn a legacy JSON record into a repository payload.

    Args:
        record: Parsed contents of one legacy post file

    Returns:
        dict keyed by Post model field names, every field defaulted

    Raises:
        ValueError: If the record is not a JSON object
    """
    if not isinstance(record, dict):
        raise ValueError(f"Expected a JSON object, got {type(record).__name__}")

    title = _pick(record, "title", default="Untitled")
    keywords = _pick(record, "keywords")
    if isinstance(keywords, list):
        keywords = ", ".join(str(k) for k in keywords)

    return {
        "title": title,
        "slug": _pick(record, "slug") or slugify(title),
        "content": _pick(record, "content"),
        "excerpt": _pick(record, "excerpt", default=""),
        "status": _pick(record, "status", default=PostStatus.DRAFT),
        "category": _pick(record, "category", default="Technology"),
        "featured_image": _pick(record, "featuredImage", "featured_image"),
        "cover_image": _pick(record, "coverImage", "cover_image"),
        "is_featured": bool(_pick(record, "isFeatured", "is_featured", default=False)),
        "author": _pick(record, "author", default="Admin"),
        "author_title": _pick(record, "authorTitle", "author_title", default="Content Creator"),
        "author_avatar": _pick(record, "authorAvatar", "author_avatar", default="AD"),
        "meta_title": _pick(record, "metaTitle", "meta_title"),
        "meta_description": _pick(record, "metaDescription", "meta_description"),
        "keywords": keywords,
        "image_alt": _pick(record, "imageAlt", "image_alt"),
        "read_time": int(_pick(record, "readTime", "read_time", default=0)),
        "canonical_url": _pick(record, "canonicalUrl", "canonical_url"),
        "seo_score": int(_pick(record, "seoScore", "seo_score", default=0)),
    }


def migrate_file_posts(
    posts_dir: Path,
    repository: Optional[PostRepository] = None,
) -> MigrationReport:
    """
    Import every *.json file in posts_dir.

    A file that fails to parse or insert is recorded in the report and the
    run moves on to the next file.

    Args:
        posts_dir: Legacy posts directory
        repository: Target repository (a new PostRepository if not given)

    Returns:
        MigrationReport with migrated/skipped/error counts

    Raises:
        LegacyDirectoryError: If posts_dir exists but cannot be listed
    """
    repository = repository or PostRepository()
    posts_dir = Path(posts_dir)
    report = MigrationReport()

    logger.info(f"[Migration] Starting migration from {posts_dir}")

    if not posts_dir.exists():
        logger.info("[Migration] No posts directory found - nothing to migrate")
        return report

    try:
        post_files = sorted(path for path in posts_dir.iterdir() if path.suffix == ".json")
    except OSError as e:
        raise LegacyDirectoryError(f"Cannot read legacy posts directory {posts_dir}: {e}") from e

    report.total = len(post_files)
    if not post_files:
        logger.info("[Migration] No post files found - nothing to migrate")
        return report

    logger.info(f"[Migration] Found {report.total} post files to migrate")

    for path in post_files:
        try:
            record = json.loads(path.read_text(encoding="utf-8"))
            data = normalize_legacy_post(record)

            if repository.get_by_slug(data["slug"]) is not None:
                logger.warning(f"[Migration] Skipping {path.name} - post with slug '{data['slug']}' already exists")
                report.skipped += 1
                continue

            post = repository.create(data)
            logger.info(f"[Migration] Migrated {path.name} -> post {post.id} ({post.title})")
            report.migrated += 1

        except Exception as e:
            logger.error(f"[Migration] Error migrating {path.name}: {e}")
            report.errors.append((path.name, str(e)))

    logger.info(
        f"[Migration] Done: {report.migrated} migrated, {report.skipped} skipped, "
        f"{report.error_count} errors, {report.total} files"
    )
    return report
