"""The `MetaData` every durable store table attaches to.

Constraint names follow a fixed convention so migrations generated on SQLite
and PostgreSQL agree (the primary key of ``kv_store`` is ``pk_kv_store``).
"""

from sqlalchemy import MetaData

metadata = MetaData(
    naming_convention={
        "pk": "pk_%(table_name)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ix": "ix_%(table_name)s_%(column_0_N_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
    }
)
