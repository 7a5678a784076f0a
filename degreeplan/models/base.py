from sqlalchemy.orm import DeclarativeBase

# Largest value an Integer key column can hold
MAX_ROW_ID = 2**31 - 1


class Base(DeclarativeBase):
    pass
