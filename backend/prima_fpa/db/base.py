from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Register mappers on the shared metadata before create_all runs.
import prima_fpa.models  # noqa: E402,F401
