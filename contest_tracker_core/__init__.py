from .comments import (
    COMMENT_PREVIEW_COUNT,
    CommentPage,
    build_comment,
    can_delete_comment,
    comment_page,
    order_comments,
    validate_comment_text,
)
from .config import Settings, configure_logging
from .errors import (
    CommentError,
    ConfigError,
    ContestTrackerError,
    PostPermissionError,
    PostingClosedError,
    ReactionError,
    ValidationError,
)
from .leaderboard import (
    LeaderboardRow,
    LeaderInfo,
    compute_totals,
    contest_leader,
    flagged_posts,
    rank_users,
)
from .migration import (
    MigrationReport,
    PostStore,
    migrate_legacy_posts,
    migrate_post_reactions,
    post_needs_migration,
)
from .phase import (
    PHASE_ORDER,
    ContestPhase,
    Countdown,
    PhaseSnapshot,
    can_post,
    classify,
    countdown,
    ensure_can_post,
    evaluate_phase,
    should_show_countdown,
    should_show_winner,
)
from .posts import (
    PostEdit,
    can_delete_post,
    can_edit_post,
    prepare_post,
    prepare_post_edit,
)
from .reactions import (
    REACTION_EMOJIS,
    THUMBS_UP,
    FlagOutcome,
    NormalizedReactions,
    ReactionOutcome,
    ReactionSummary,
    check_viewer,
    clear_flags,
    normalize,
    reaction_tooltip,
    summarize,
    toggle_flag,
    toggle_reaction,
    toggle_upvote,
)
from .types import CommentDoc, ContestDoc, PostDoc, UserDoc
from .validation import (
    COMMENT_MAX_LENGTH,
    Comment,
    Contest,
    ContestPost,
    InputSanitizer,
    ParseReport,
    PostDraft,
    User,
    parse_records,
)

__all__ = [
    "COMMENT_MAX_LENGTH",
    "COMMENT_PREVIEW_COUNT",
    "Comment",
    "CommentDoc",
    "CommentError",
    "CommentPage",
    "ConfigError",
    "Contest",
    "ContestDoc",
    "ContestPhase",
    "ContestPost",
    "ContestTrackerError",
    "Countdown",
    "FlagOutcome",
    "InputSanitizer",
    "LeaderInfo",
    "LeaderboardRow",
    "MigrationReport",
    "NormalizedReactions",
    "PHASE_ORDER",
    "ParseReport",
    "PhaseSnapshot",
    "PostDoc",
    "PostDraft",
    "PostEdit",
    "PostPermissionError",
    "PostStore",
    "PostingClosedError",
    "REACTION_EMOJIS",
    "ReactionError",
    "ReactionOutcome",
    "ReactionSummary",
    "Settings",
    "THUMBS_UP",
    "User",
    "UserDoc",
    "ValidationError",
    "build_comment",
    "can_delete_comment",
    "can_delete_post",
    "can_edit_post",
    "can_post",
    "check_viewer",
    "classify",
    "clear_flags",
    "comment_page",
    "compute_totals",
    "configure_logging",
    "contest_leader",
    "countdown",
    "ensure_can_post",
    "evaluate_phase",
    "flagged_posts",
    "migrate_legacy_posts",
    "migrate_post_reactions",
    "normalize",
    "order_comments",
    "parse_records",
    "post_needs_migration",
    "prepare_post",
    "prepare_post_edit",
    "rank_users",
    "reaction_tooltip",
    "should_show_countdown",
    "should_show_winner",
    "summarize",
    "toggle_flag",
    "toggle_reaction",
    "toggle_upvote",
    "validate_comment_text",
]
