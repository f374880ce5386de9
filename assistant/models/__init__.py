from assistant.models.enums import MessageRole, FileType, ProcessingStatus, SearchType
from assistant.models.user import User
from assistant.models.conversation import Conversation
from assistant.models.message import Message
from assistant.models.media_file import MediaFile
from assistant.models.search_query import SearchQuery
from assistant.models.ai_model import AIModel

__all__ = [
    "MessageRole", "FileType", "ProcessingStatus", "SearchType",
    "User", "Conversation", "Message", "MediaFile", "SearchQuery", "AIModel",
]
