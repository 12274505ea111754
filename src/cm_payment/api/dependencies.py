from starlette.requests import Request

from src.cm_payment.domain.gateway import PaymentGatewayProtocol


def get_payment_gateway(request: Request) -> PaymentGatewayProtocol:
    """FastAPI dependency: the payment gateway built in the app lifespan."""
    return request.app.state.payment_gateway
