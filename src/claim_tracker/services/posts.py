"""Announcement feed and comments."""

import uuid
from typing import Any, Optional

from claim_tracker.db.store import RecordStore
from claim_tracker.exceptions import NotFound
from claim_tracker.models.caller import Caller
from claim_tracker.models.post import Comment, CommentInput, Post, PostInput
from claim_tracker.observability import get_logger, log_claim_event
from claim_tracker.services.base import BaseService, parse_input
from claim_tracker.services.gate import AccessGate, require_admin, require_authenticated
from claim_tracker.utils.retry import UpstreamCaller

logger = get_logger(__name__)

UNKNOWN_AUTHOR = "Unknown user"


class PostService(BaseService):
    def __init__(self, store: RecordStore, upstream: UpstreamCaller, gate: AccessGate):
        super().__init__(store, upstream)
        self._gate = gate

    def _author_names(self, user_ids: set[str], timeout: Optional[float]) -> dict[str, str]:
        names = {}
        for user_id in user_ids:
            profile = self._gate.load_profile(user_id, timeout=timeout)
            names[user_id] = profile.full_name if profile else UNKNOWN_AUTHOR
        return names

    def _with_author(self, row: dict[str, Any], key: str, timeout: Optional[float]) -> dict[str, Any]:
        names = self._author_names({row[key]}, timeout)
        return {**row, "author_name": names[row[key]]}

    def _require_post(self, post_id: str, timeout: Optional[float]) -> dict[str, Any]:
        row = self._find("posts", timeout=timeout, id=post_id)
        if row is None:
            raise NotFound("post", post_id)
        return row

    def list_posts(self, timeout: Optional[float] = None) -> list[Post]:
        """All posts, newest first. Open to anonymous callers."""
        rows = self._list("posts", timeout=timeout)
        names = self._author_names({r["created_by"] for r in rows}, timeout)
        return [Post.model_validate({**r, "author_name": names[r["created_by"]]}) for r in rows]

    def create_post(self, caller: Caller, post: PostInput | dict[str, Any], timeout: Optional[float] = None) -> Post:
        caller = require_admin(self._gate.resolve(caller, timeout=timeout), "create posts")
        data = parse_input(PostInput, post)
        row = self._call(
            "posts:insert",
            self._store.insert,
            "posts",
            {"id": str(uuid.uuid4()), "created_by": caller.user_id, **data.model_dump()},
            timeout=timeout,
        )
        log_claim_event(logger, "post_created", post_id=row["id"], author=caller.user_id)
        return Post.model_validate(self._with_author(row, "created_by", timeout))

    def update_post(
        self, caller: Caller, post_id: str, post: PostInput | dict[str, Any], timeout: Optional[float] = None
    ) -> Post:
        """Replace title, content and media of a post."""
        caller = require_admin(self._gate.resolve(caller, timeout=timeout), "edit posts")
        data = parse_input(PostInput, post)
        self._require_post(post_id, timeout)
        row = self._call("posts:update", self._store.update, "posts", post_id, data.model_dump(), timeout=timeout)
        if row is None:
            raise NotFound("post", post_id)
        log_claim_event(logger, "post_updated", post_id=post_id, editor=caller.user_id)
        return Post.model_validate(self._with_author(row, "created_by", timeout))

    def delete_post(self, caller: Caller, post_id: str, timeout: Optional[float] = None) -> bool:
        """Delete a post and its comments."""
        caller = require_admin(self._gate.resolve(caller, timeout=timeout), "delete posts")
        deleted = self._call("posts:delete", self._store.delete, "posts", post_id, timeout=timeout)
        if not deleted:
            raise NotFound("post", post_id)
        log_claim_event(logger, "post_deleted", post_id=post_id, editor=caller.user_id)
        return True

    def list_comments(self, post_id: str, timeout: Optional[float] = None) -> list[Comment]:
        """Comments of a post, newest first."""
        self._require_post(post_id, timeout)
        rows = self._list("comments", timeout=timeout, post_id=post_id)
        names = self._author_names({r["user_id"] for r in rows}, timeout)
        return [Comment.model_validate({**r, "author_name": names[r["user_id"]]}) for r in rows]

    def add_comment(
        self, caller: Caller, post_id: str, body: str, timeout: Optional[float] = None
    ) -> Comment:
        """Any signed-in caller, verified or not, may comment."""
        caller = require_authenticated(self._gate.resolve(caller, timeout=timeout), "comment")
        data = parse_input(CommentInput, {"content": body})
        self._require_post(post_id, timeout)
        row = self._call(
            "comments:insert",
            self._store.insert,
            "comments",
            {"id": str(uuid.uuid4()), "post_id": post_id, "user_id": caller.user_id, "content": data.content},
            timeout=timeout,
        )
        return Comment.model_validate(self._with_author(row, "user_id", timeout))
