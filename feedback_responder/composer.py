"""Customer reply selection: static templates or generated text."""
from typing import Union

from reply_parser import ParsedReply
from schemas import GeneratedReply, Sentiment

# Static replies used when generation is skipped or fails
FALLBACK_RESPONSES = {
    Sentiment.POSITIVE.value: (
        "Thank you for your positive feedback! We're delighted to hear that you had "
        "a great experience with our product. Your satisfaction is our priority, and "
        "we appreciate you taking the time to share your thoughts."
    ),
    Sentiment.NEGATIVE.value: (
        "We sincerely apologize for your experience. Your feedback is important to us, "
        "and we'll use it to improve our products and services. Please reach out to our "
        "customer service team if there's anything we can do to address your concerns."
    ),
    Sentiment.NEUTRAL.value: (
        "Thank you for sharing your feedback. We appreciate your honest assessment and "
        "will take your comments into consideration as we continue to improve our "
        "products and services. Please don't hesitate to reach out if you have any "
        "other thoughts."
    ),
}


def fallback_response(sentiment: Union[Sentiment, str, None]) -> str:
    """Static reply for a sentiment, Neutral when the label is unknown."""
    key = sentiment.value if isinstance(sentiment, Sentiment) else sentiment
    return FALLBACK_RESPONSES.get(key, FALLBACK_RESPONSES[Sentiment.NEUTRAL.value])


def compose_reply(parsed: ParsedReply, sentiment: Union[Sentiment, str]) -> GeneratedReply:
    """Build the customer reply from parsed generated text.

    A missing or blank RESPONSE section falls back to the static template,
    the insight and keyword lists are passed through as parsed.
    """
    return GeneratedReply(
        customer_response=parsed.response or fallback_response(sentiment),
        key_insights=list(parsed.key_insights),
        keywords=list(parsed.keywords),
    )
