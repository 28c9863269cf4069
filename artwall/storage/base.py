"""Abstract base class for storage backends."""

import base64
from abc import ABC, abstractmethod

from ..errors import ValidationError
from ..ids import new_id, now_ms
from ..models import Comment, Direction, Post


def _require(field: str, value: str | None) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field)
    return value


class StorageBackend(ABC):
    """Interface that all storage backends must implement.

    The public operations validate their input and build new records here;
    subclasses only persist and read back. Every operation is atomic, and a
    caller sees its own write on the next read.
    """

    # ── Public operations ──

    def create_post(
        self,
        name: str,
        title: str,
        desc: str,
        image: bytes,
        mime_type: str,
        created_at: int | None = None,
    ) -> Post:
        """Store a new post and return it.

        Args:
            name: Author name, already trimmed/capped by the caller.
            title: Post title, already trimmed/capped.
            desc: Optional description; may be empty.
            image: Raw image bytes.
            mime_type: MIME type of ``image``, e.g. ``image/png``.
            created_at: Creation time in ms since epoch. Defaults to now.

        Returns:
            The new Post with ``like_count == 0`` and no comments.

        Raises:
            ValidationError: If name, title, image or mime_type is empty.
            StorageError: If the durable write fails.
        """
        _require("name", name)
        _require("title", title)
        if not image:
            raise ValidationError("image")
        _require("mime_type", mime_type)

        ts = now_ms() if created_at is None else int(created_at)
        post = Post(
            id=new_id(ts),
            name=name,
            title=title,
            desc=desc or "",
            image_b64=base64.b64encode(image).decode("ascii"),
            mime_type=mime_type,
            created_at=ts,
        )
        self._insert_post(post)
        return post

    def adjust_like(self, post_id: str, direction: str | Direction) -> int:
        """Increment (``like``) or decrement (``unlike``) a post's like count.

        The count never drops below zero. Returns the count after adjustment.

        Raises:
            ValidationError: If direction is not ``like``/``unlike``.
            NotFoundError: If the post does not exist.
        """
        return self._adjust_like(post_id, Direction.parse(direction))

    def add_comment(
        self,
        post_id: str,
        name: str,
        text: str,
        created_at: int | None = None,
    ) -> Comment:
        """Append a comment to an existing post.

        Raises:
            ValidationError: If name or text is empty.
            NotFoundError: If the post does not exist. No comment is stored.
        """
        _require("name", name)
        _require("text", text)

        ts = now_ms() if created_at is None else int(created_at)
        comment = Comment(
            id=new_id(ts), post_id=post_id, name=name, text=text, created_at=ts,
        )
        self._insert_comment(comment)
        return comment

    @abstractmethod
    def list_posts(self) -> list[Post]:
        """All posts newest-first, each with comments oldest-first."""

    @abstractmethod
    def get_post(self, post_id: str) -> Post:
        """Get one post with its comments. Raises NotFoundError."""

    @abstractmethod
    def delete_post(self, post_id: str) -> None:
        """Delete a post and all of its comments. Raises NotFoundError."""

    @abstractmethod
    def get_post_count(self) -> int:
        """Get total number of stored posts."""

    @abstractmethod
    def import_posts(self, posts: list[Post]) -> int:
        """Copy posts (ids, counts and comments intact) in one write.

        Posts whose id already exists are skipped. Returns how many were added.
        """

    # ── Backend hooks ──

    @abstractmethod
    def _insert_post(self, post: Post) -> None:
        """Durably store a freshly built post."""

    @abstractmethod
    def _adjust_like(self, post_id: str, direction: Direction) -> int:
        """Atomically apply ``direction`` to the post's count."""

    @abstractmethod
    def _insert_comment(self, comment: Comment) -> None:
        """Durably append a comment after checking its post exists."""

    def close(self):
        """Clean up resources."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
