from sqlalchemy.orm import declarative_base

base = declarative_base()
