"""Common FastAPI dependencies for consistent type annotations.

Usage:
    from taskboard.deps import CurrentSession, DbSession

    async def my_endpoint(db: DbSession, session: CurrentSession):
        # db is AsyncSession with get_db dependency injected
        # session.user is the resolved caller
        ...
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.auth import AuthenticatedSession, get_current_session
from taskboard.database import get_db
from taskboard.security import TokenSigner, get_token_signer

DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentSession = Annotated[AuthenticatedSession, Depends(get_current_session)]
Signer = Annotated[TokenSigner, Depends(get_token_signer)]

__all__ = ["CurrentSession", "DbSession", "Signer"]
