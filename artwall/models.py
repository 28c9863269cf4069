"""
Data models for artwall.

Posts and comments are plain dataclasses. ``to_dict`` renders the wire shape
handed to front ends; ``to_record``/``from_record`` map to the JSON document
layout, which keeps the camelCase keys of existing gallery.json files.
"""

import base64
import binascii
import enum
from dataclasses import dataclass, field

from .errors import ValidationError


class Direction(str, enum.Enum):
    LIKE = "like"
    UNLIKE = "unlike"

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Accept an enum member or its string token."""
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                "direction", f"direction must be 'like' or 'unlike', got {value!r}"
            ) from None

    def apply(self, count: int) -> int:
        """Return the count after this adjustment, floored at zero."""
        if self is Direction.LIKE:
            return count + 1
        return max(0, count - 1)


def data_uri(mime_type: str, image_b64: str) -> str:
    return f"data:{mime_type};base64,{image_b64}"


def parse_data_uri(src: str) -> tuple[str, bytes]:
    """Split a ``data:<mime>;base64,<data>`` URI into (mime, raw bytes).

    Raises:
        ValueError: If the string is not a base64 data URI.
    """
    if not src.startswith("data:"):
        raise ValueError("not a data URI")
    header, sep, payload = src[5:].partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("not a base64 data URI")
    try:
        raw = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"bad base64 payload: {e}") from e
    return header[: -len(";base64")], raw


@dataclass
class Comment:
    id: str
    post_id: str
    name: str
    text: str
    created_at: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "text": self.text,
            "createdAt": self.created_at,
        }

    def to_record(self) -> dict:
        return self.to_dict()

    @classmethod
    def from_record(cls, post_id: str, rec: dict) -> "Comment":
        # Older gallery.json files store comment time as created_at
        created = rec.get("createdAt", rec.get("created_at", 0))
        return cls(
            id=rec["id"],
            post_id=post_id,
            name=rec.get("name", ""),
            text=rec.get("text", ""),
            created_at=int(created),
        )


@dataclass
class Post:
    id: str
    name: str
    title: str
    desc: str
    image_b64: str
    mime_type: str
    created_at: int
    like_count: int = 0
    comments: list[Comment] = field(default_factory=list)

    @property
    def image_src(self) -> str:
        return data_uri(self.mime_type, self.image_b64)

    @property
    def image_bytes(self) -> bytes:
        return base64.b64decode(self.image_b64)

    def to_dict(self, include_image: bool = True) -> dict:
        """Wire representation, comments oldest-first."""
        d = {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "desc": self.desc,
            "imageSrc": self.image_src,
            "likeCount": self.like_count,
            "createdAt": self.created_at,
            "comments": [c.to_dict() for c in self.comments],
        }
        if not include_image:
            del d["imageSrc"]
        return d

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "desc": self.desc,
            "imageB64": self.image_b64,
            "mimeType": self.mime_type,
            "likeCount": self.like_count,
            "comments": [c.to_record() for c in self.comments],
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, rec: dict) -> "Post":
        post_id = rec["id"]
        comments = [Comment.from_record(post_id, c) for c in rec.get("comments") or []]
        return cls(
            id=post_id,
            name=rec.get("name", ""),
            title=rec.get("title", ""),
            desc=rec.get("desc", ""),
            image_b64=rec.get("imageB64", ""),
            mime_type=rec.get("mimeType", ""),
            created_at=int(rec.get("createdAt", 0)),
            like_count=max(0, int(rec.get("likeCount") or 0)),
            comments=sort_comments(comments),
        )


def sort_comments(comments: list[Comment]) -> list[Comment]:
    """Oldest-first; stable, so insertion order breaks ties."""
    return sorted(comments, key=lambda c: c.created_at)


def sort_feed(posts: list[Post]) -> list[Post]:
    """Newest-first. ``posts`` must be in insertion order; later inserts win ties."""
    indexed = list(enumerate(posts))
    indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
    return [p for _, p in indexed]


def oldest_first(feed: list[Post]) -> list[Post]:
    """Invert a newest-first feed back into insertion order."""
    return sorted(reversed(feed), key=lambda p: p.created_at)
