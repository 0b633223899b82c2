"""Tests for PostService — create, edit, view, and list posts."""

import pytest
from inkwell.errors import PersistenceError, RetrievalError, StoreError, ValidationError
from inkwell.posts.models import PostForm
from inkwell.posts.services import PostService, validate_form
from inkwell.store.base import POSTS, OrderBy, Predicate, Record
from inkwell.store.local import LocalDocumentStore


def _form(title: str = "Hello World", content: str = "# Hi\nSome **text**.", **kwargs) -> PostForm:
    return PostForm(title=title, content=content, **kwargs)


class _BrokenStore(LocalDocumentStore):
    """Every write and bulk read fails; existence checks still work."""

    def insert(self, collection: str, record: Record) -> Record:
        raise StoreError("insert refused")

    def update(self, collection: str, record_id: str, patch: Record) -> Record:
        raise StoreError("update refused")

    def select_many(
        self,
        collection: str,
        predicate: Predicate | None = None,
        order_by: OrderBy | None = None,
        limit: int | None = None,
    ) -> list[Record]:
        raise StoreError("select refused")


@pytest.fixture
def service() -> PostService:
    return PostService(LocalDocumentStore())


class TestValidateForm:
    def test_accepts_complete_form(self):
        validate_form(_form())

    @pytest.mark.parametrize("title,content", [("", "body"), ("title", "   "), ("", "")])
    def test_rejects_missing_fields(self, title, content):
        with pytest.raises(ValidationError):
            validate_form(PostForm(title=title, content=content))


class TestCreate:
    def test_creates_published_post(self, service: PostService):
        post = service.create(_form(category="TIL", tags=["python"]), publish=True)

        assert post.slug == "hello-world"
        assert post.published is True
        assert post.excerpt == "Hi Some text."
        assert post.category == "TIL"
        assert post.tags == ["python"]
        assert post.id

    def test_empty_category_stored_as_none(self, service: PostService):
        post = service.create(_form(category=""), publish=True)
        assert post.category is None

    def test_duplicate_titles_get_suffixes(self, service: PostService):
        first = service.create(_form(), publish=True)
        second = service.create(_form(), publish=True)
        third = service.create(_form(), publish=True)
        assert [first.slug, second.slug, third.slug] == [
            "hello-world",
            "hello-world-1",
            "hello-world-2",
        ]

    def test_validation_happens_before_store(self):
        store = _BrokenStore()
        with pytest.raises(ValidationError):
            PostService(store).create(_form(title=""), publish=True)

    def test_insert_failure_is_persistence_error(self):
        with pytest.raises(PersistenceError):
            PostService(_BrokenStore()).create(_form(), publish=True)


class TestUpdate:
    def test_keeps_slug_when_title_unchanged(self, service: PostService):
        post = service.create(_form(), publish=True)
        updated = service.update(post.id, _form(title="Hello  World!", content="New"), publish=True)

        assert updated.slug == "hello-world"
        assert updated.content == "New"
        assert updated.updated_at is not None
        assert updated.updated_at >= post.updated_at

    def test_keeps_suffixed_slug_when_title_unchanged(self, service: PostService):
        service.create(_form(), publish=True)
        second = service.create(_form(content="b"), publish=True)
        assert second.slug == "hello-world-1"

        updated = service.update(second.id, _form(content="b edited"), publish=True)

        assert updated.slug == "hello-world-1"
        assert updated.content == "b edited"

    def test_new_title_resolves_new_slug(self, service: PostService):
        service.create(_form(title="Second"), publish=True)
        post = service.create(_form(title="First"), publish=True)

        updated = service.update(post.id, _form(title="Second"), publish=True)
        assert updated.slug == "second-1"

    def test_can_unpublish(self, service: PostService):
        post = service.create(_form(), publish=True)
        updated = service.update(post.id, _form(), publish=False)
        assert updated.published is False
        assert service.get_by_slug("hello-world") is None
        assert service.get_by_slug("hello-world", published_only=False) is not None

    def test_missing_post(self, service: PostService):
        with pytest.raises(PersistenceError):
            service.update("nope", _form(), publish=True)


class TestRead:
    def test_get_by_id(self, service: PostService):
        post = service.create(_form(), publish=False)
        fetched = service.get(post.id)
        assert fetched is not None
        assert fetched.title == "Hello World"

    def test_get_missing(self, service: PostService):
        assert service.get("missing") is None

    def test_get_by_slug_published_only(self, service: PostService):
        service.create(_form(), publish=False)
        assert service.get_by_slug("hello-world") is None

    def test_read_failure_is_retrieval_error(self):
        service = PostService(_BrokenStore())
        with pytest.raises(RetrievalError):
            service.get_by_slug("anything")
        with pytest.raises(RetrievalError):
            service.list_posts()
        with pytest.raises(RetrievalError):
            service.list_categories()


class TestListPosts:
    @pytest.fixture
    def populated(self, service: PostService) -> PostService:
        service.create(_form(title="Python tips", content="Use pathlib", category="TIL"), publish=True)
        service.create(_form(title="Year in review", content="A good year", category="Retro"), publish=True)
        service.create(_form(title="Secret", content="unpublished pathlib notes", category="TIL"), publish=False)
        service.create(_form(title="Rust notes", content="Ownership", category="TIL"), publish=True)
        return service

    def test_newest_first_published_only(self, populated: PostService):
        titles = [p.title for p in populated.list_posts()]
        assert titles == ["Rust notes", "Year in review", "Python tips"]

    def test_include_unpublished(self, populated: PostService):
        assert len(populated.list_posts(published_only=False)) == 4

    def test_category_filter(self, populated: PostService):
        titles = [p.title for p in populated.list_posts(category="TIL")]
        assert titles == ["Rust notes", "Python tips"]

    def test_search_matches_title_and_content(self, populated: PostService):
        assert [p.title for p in populated.list_posts(search="PATHLIB")] == ["Python tips"]
        assert [p.title for p in populated.list_posts(search="review")] == ["Year in review"]

    def test_limit(self, populated: PostService):
        assert len(populated.list_posts(limit=2)) == 2

    def test_categories(self, populated: PostService):
        assert populated.list_categories() == ["Retro", "TIL"]
