import uuid


def new_correlation_id() -> uuid.UUID:
    # One per workflow invocation; travels in the message and in every log line.
    return uuid.uuid4()
