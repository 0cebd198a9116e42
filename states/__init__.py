from .profile_setup import ProfileSetup
from .trainer_registration import TrainerRegistration
from .conversations import TrainerSearch, CommentInput, ChatConversation, SupportConversation

__all__ = [
    "ProfileSetup",
    "TrainerRegistration",
    "TrainerSearch",
    "CommentInput",
    "ChatConversation",
    "SupportConversation",
]
