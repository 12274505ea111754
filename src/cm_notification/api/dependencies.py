from starlette.requests import Request

from src.cm_notification.domain.sender import EmailSenderProtocol


def get_email_sender(request: Request) -> EmailSenderProtocol:
    """FastAPI dependency: the email sender built in the app lifespan."""
    return request.app.state.email_sender
