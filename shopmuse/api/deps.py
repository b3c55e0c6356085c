# shopmuse/api/deps.py
from typing import Annotated, AsyncIterator, Optional
from fastapi import Depends, Header, Request, Response

from shopmuse.domain.services.session import AppContainer, ShopSession

SESSION_HEADER = "X-Session-Id"


# Dependency for the process-wide container built in the lifespan
def get_container(request: Request) -> AppContainer:
    return request.app.state.container


# Dependency for the caller's session.
# Without the header the session lives for this request only; its id is echoed
# so the client can resume it (state is persisted in the store) by sending it back.
async def get_session(
    response: Response,
    container: AppContainer = Depends(get_container),
    x_session_id: Optional[str] = Header(default=None, alias=SESSION_HEADER),
) -> AsyncIterator[ShopSession]:
    if x_session_id:
        session = await container.open_session(x_session_id)
        response.headers[SESSION_HEADER] = session.session_id
        yield session
        return

    session = await container.open_transient_session()
    response.headers[SESSION_HEADER] = session.session_id
    try:
        yield session
    finally:
        await session.close()


ContainerDep = Annotated[AppContainer, Depends(get_container)]
SessionDep = Annotated[ShopSession, Depends(get_session)]
