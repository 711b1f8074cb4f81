from http import HTTPStatus


def reason_phrase(status_code: int) -> str:
    """Returns the human readable reason phrase of an HTTP status code."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        pass

    category = status_code // 100
    if category == 1:  # 1xx informational
        return "informational"
    elif category == 2:  # 2xx success
        return "success"
    elif category == 3:  # 3xx redirection
        return "redirected"
    elif category == 4:  # 4xx client error
        return "client error"
    elif category == 5:  # 5xx server error
        return "server error"

    return "unknown"
