import httpx
from quizgate.core.config import Settings


def build_client(settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Shared outbound client for the vault and the email API; owned by the app lifespan."""
    return httpx.AsyncClient(
        http2=True,
        timeout=settings.REQUEST_TIMEOUT_SECONDS,
        transport=transport,
        headers={"User-Agent": f"{settings.APP_NAME}-auth-bridge"},
    )


async def close_client(client: httpx.AsyncClient | None) -> None:
    if client is not None:
        await client.aclose()
