"""Post domain — models, slug resolution, and the post service."""

from inkwell.posts.models import Post, PostForm
from inkwell.posts.services import PostService, validate_form
from inkwell.posts.slugs import extract_excerpt, normalize_slug, resolve_unique_slug

__all__ = [
    "Post",
    "PostForm",
    "PostService",
    "extract_excerpt",
    "normalize_slug",
    "resolve_unique_slug",
    "validate_form",
]
