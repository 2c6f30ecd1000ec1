"""
Closed enumerations shared by models and schemas
"""
from enum import Enum


class ResourceType(str, Enum):
    """Kind of study material a resource points at"""

    YOUTUBE = "youtube"
    WEBPAGE = "webpage"
    DOCUMENT = "document"
    IMAGE = "image"


class LearningStatus(str, Enum):
    """Learner's progress on a single resource"""

    REFERENCE = "reference"  # not meant to be learned
    TODO = "todo"
    IN_PROGRESS = "inprogress"
    DONE = "done"


class QuizStatus(str, Enum):
    """Generation state of a quiz: generating -> ready | failed, exactly once"""

    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class QuestionDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
