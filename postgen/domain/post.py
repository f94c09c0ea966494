from dataclasses import dataclass


@dataclass(slots=True)
class GeneratedPost:
    content: str
    image_prompt: str
