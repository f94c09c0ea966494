from enum import Enum


class Tone(str, Enum):
    professional = "professional"
    inspirational = "inspirational"
    humorous = "humorous"
    educational = "educational"

class IdentityKind(str, Enum):
    session = "session"
    user = "user"
