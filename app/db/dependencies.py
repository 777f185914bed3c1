from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.config import Settings


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    The session comes from the Database handle created by create_app().

    Usage:
        @app.get("/")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def get_app_settings(request: Request) -> Settings:
    """Dependency that provides the Settings the app was built with."""
    return request.app.state.settings
