from ai_pr_reviewer.models.review import (
    CommentPublication,
    ExistingComment,
    FilePatch,
    PullRequestRef,
    ReviewFailure,
    ReviewResult,
    ReviewSuccess,
)

__all__ = [
    "CommentPublication",
    "ExistingComment",
    "FilePatch",
    "PullRequestRef",
    "ReviewFailure",
    "ReviewResult",
    "ReviewSuccess",
]
