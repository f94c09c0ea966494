import re

SESSION_ID_RE = re.compile(r"^session_\d{10,15}_[a-z0-9]{8,20}$")

TOPIC_MIN_LENGTH = 3
TOPIC_MAX_LENGTH = 500

DEFAULT_TONE = "professional"

GENERATE_CONTENT_PATH = "/models/{model}:generateContent"

GENERIC_ERROR = "An error occurred"

FREE_LIMIT_REACHED = "Free limit reached"

FREE_LIMIT_MESSAGE = (
    "You've used all {limit} free generations. Sign in with Google for unlimited access!"
)

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again in a moment."

CREDITS_EXHAUSTED_MESSAGE = "AI credits exhausted. Please add credits to continue."

UPSTREAM_FAILED_MESSAGE = "Failed to generate post"

EMPTY_RESPONSE_MESSAGE = "No content received from AI"

MALFORMED_RESPONSE_MESSAGE = "Failed to parse AI response"

SESSION_ID_KEY = "linkedin-generator-session-id"
USAGE_KEY = "linkedin-generator-usage"
