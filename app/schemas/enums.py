from enum import Enum


class GameType(str, Enum):
    TWO_TRUTHS_LIE = "two_truths_lie"
    WOULD_YOU_RATHER = "would_you_rather"
    INTIMACY_SPECTRUM = "intimacy_spectrum"
    NEVER_HAVE_I_EVER = "never_have_i_ever"
    WHAT_WOULD_YOU_DO = "what_would_you_do"
    DREAM_BOARD = "dream_board"


# Aggregator iteration order
GAME_TYPES: tuple[GameType, ...] = (
    GameType.TWO_TRUTHS_LIE,
    GameType.WOULD_YOU_RATHER,
    GameType.INTIMACY_SPECTRUM,
    GameType.NEVER_HAVE_I_EVER,
    GameType.WHAT_WOULD_YOU_DO,
    GameType.DREAM_BOARD,
)


class SessionStatus(str, Enum):
    PENDING = "pending"
    STARTING = "starting"
    PLAYING = "playing"
    PAUSED = "paused"
    ACTIVE = "active"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    DISCUSSION = "discussion"
    DECLINED = "declined"
    EXPIRED = "expired"
    ABANDONED = "abandoned"


# At most one session per couple and game type may sit in one of these.
NON_TERMINAL_STATUSES: frozenset[SessionStatus] = frozenset({
    SessionStatus.PENDING,
    SessionStatus.STARTING,
    SessionStatus.PLAYING,
    SessionStatus.PAUSED,
    SessionStatus.ANALYZING,
    SessionStatus.ACTIVE,
})

FAILED_STATUSES: frozenset[SessionStatus] = frozenset({
    SessionStatus.DECLINED,
    SessionStatus.EXPIRED,
    SessionStatus.ABANDONED,
})

FINISHED_STATUSES: frozenset[SessionStatus] = frozenset({
    SessionStatus.COMPLETED,
    SessionStatus.DISCUSSION,
})

# Statuses the reaper moves to ``expired`` once ``expires_at`` has passed.
REAPABLE_STATUSES: frozenset[SessionStatus] = frozenset({
    SessionStatus.PENDING,
    SessionStatus.STARTING,
    SessionStatus.ACTIVE,
    SessionStatus.PLAYING,
    SessionStatus.PAUSED,
    SessionStatus.ANALYZING,
})


class QuestionPhase(str, Enum):
    ANSWERING = "answering"
    REVEALING = "revealing"


class WyrChoice(str, Enum):
    A = "A"
    B = "B"


class Priority(str, Enum):
    HEART_SET = "heart_set"
    DREAM = "dream"
    FLOW = "flow"


class Timeline(str, Enum):
    CANT_WAIT = "cant_wait"
    WHEN_RIGHT = "when_right"
    SOMEDAY = "someday"


class CardId(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class AlignmentLevel(str, Enum):
    ALIGNED = "aligned"
    CLOSE = "close"
    DIFFERENT = "different"
    NEEDS_CONVERSATION = "needs_conversation"


class TwoTruthsPhase(str, Enum):
    WRITING = "writing"
    SUBMITTED_STATEMENTS = "submitted_statements"
    ANSWERING = "answering"
    COMPLETED = "completed"


class Dimension(str, Enum):
    INTUITION = "intuition"
    LIFESTYLE = "lifestyle"
    PHYSICAL = "physical"
    EXPERIENCE = "experience"
    CHARACTER = "character"
    FUTURE = "future"


class ConfidenceLevel(str, Enum):
    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
